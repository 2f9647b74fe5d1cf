from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql://postgres:postgres@db:5432/flare_insights"
    log_level: str = "INFO"

    # Correlation thresholds
    correlation_min_sample_size: int = 3
    correlation_high_sample_size: int = 10
    correlation_p_value_threshold: float = 0.05
    correlation_strong_consistency: float = 0.6
    correlation_default_range_days: int = 30

    # Combination (synergy) detection
    combination_synergy_margin: float = 0.15

    # Dose-response thresholds
    dose_response_min_sample_size: int = 5
    dose_response_high_r2: float = 0.7
    dose_response_medium_r2: float = 0.4
    dose_response_window_hours: int = 24

    # Monthly trend thresholds
    trend_slope_threshold: float = 0.3
    trend_min_months: int = 3

    # Timeline pattern detection
    pattern_max_lag_hours: int = 48
    pattern_min_frequency: int = 3
    pattern_medium_frequency: int = 5

    class Config:
        env_file = ".env"


settings = Settings()
