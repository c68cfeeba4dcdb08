"""配置管理模块。

支持从 .env、config.yaml 以及环境变量加载配置，环境变量统一使用
ORDERBOT_ 前缀（例如 ORDERBOT_BASE_URL、ORDERBOT_MAX_RETRIES）。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_BASE_URL = "http://157.173.218.48:8001"


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("ORDERBOT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class OrderBotSettings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- 服务地址 ----
    base_url: str = Field(default=DEFAULT_BASE_URL, description="下单服务基础URL")

    # ---- 单次尝试超时 ----
    text_timeout: float = Field(default=10.0, ge=1.0, description="文本请求单次超时（秒）")
    media_timeout: float = Field(default=15.0, ge=1.0, description="语音/图片请求单次超时（秒）")

    # ---- 重试策略 ----
    max_retries: int = Field(default=3, ge=0, le=10, description="最大重试次数（不含首发）")
    retry_base_delay: float = Field(default=1.0, gt=0, description="首次重试前的等待秒数")
    retry_max_delay: float = Field(default=10.0, gt=0, description="单次等待上限（秒）")
    retry_on_rate_limit: bool = Field(
        default=False,
        description="是否把 429 视为可重试错误（默认与其他 4xx 一样直接失败）",
    )

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_level: str = Field(default="INFO", description="日志级别")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_prefix="ORDERBOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v!r}")
        return level

    @model_validator(mode="after")
    def validate_delays(self) -> "OrderBotSettings":
        if self.retry_max_delay < self.retry_base_delay:
            raise ValueError("retry_max_delay must be >= retry_base_delay")
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = OrderBotSettings()

# 类型别名，让外部代码可以使用 Settings 类型
Settings = OrderBotSettings
