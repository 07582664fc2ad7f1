"""
recsys_runner.components — pluggable job components.

Modules:
  base         — capability contracts (DataModel, Recommender, ...).
  data         — TextDataModel and its kcv/loocv/given/ratio splitters.
  similarity   — cosine and Jaccard similarity.
  recommenders — MostPopular, ItemKNN, UserKNN.
  measures     — precision, recall, hit rate, MAE, RMSE.
  filters      — GenericRecommendedFilter.
  builtins     — imports all of the above so their drivers are registered.
"""
