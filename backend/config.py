from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Experience selection
    selection_max_experiences: int = 4
    selection_min_score: float = 0.35
    skill_pool_cap: int = 40
    job_keyword_limit: int = 150
    keyword_score_limit: int = 40

    # ATS semantic upgrade pass (empirically tuned, see DESIGN.md)
    ats_semantic_threshold: float = 0.58
    ats_partial_threshold: float = 0.45
    ats_semantic_score: float = 0.9
    ats_partial_score: float = 0.5
    ats_max_skill_phrases: int = 50

    # Embedding provider
    embedding_model: str = "TechWolf/JobBERT-v2"
    embedding_cache_size: int = 2048

    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
