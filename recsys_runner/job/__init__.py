"""
recsys_runner.job — the experiment orchestrator.

Modules
-------
configuration       Dotted-key property store shared by all stages.
registry            Component resolution by configuration key.
context             FoldRun and the per-fold RecommenderContext.
data_provider       Job-lifetime DataModel owner.
similarity_builder  Builds and registers the fold's similarity matrices.
evaluation          Designated-evaluator vs. all-measures reporting.
writer              Deterministic output path and result serialization.
pipeline            The single-fold step sequence.
runner              RecommenderJob: the cross-validation controller.
"""
