from .loader import BUILTIN_PIPELINE, PipelineConfig, build_pipeline, expand_variables, load_pipeline

__all__ = ["BUILTIN_PIPELINE", "PipelineConfig", "build_pipeline", "expand_variables", "load_pipeline"]
