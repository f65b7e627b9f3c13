from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STATIC_DIR = Path(__file__).parent / "static"


class Settings(BaseSettings):
    # Note: do not hardcode env_file here; tests instantiate Settings() directly and
    # should not implicitly read the repo's .env. Runtime uses get_settings().
    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "qcstudio-backend"
    environment: str = Field(default="dev", description="dev|staging|prod")
    log_level: str = Field(default="INFO", description="Root log level")

    api_v1_prefix: str = "/api/v1"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # 数据库（仅保存运维可修改的持久化配置）
    database_url: str = Field(default="sqlite+aiosqlite:///./qcstudio.db")
    db_echo: bool = False

    # 导入与重新生成的图片写入此目录，通过 /static 对外提供
    static_dir: str = Field(default=str(DEFAULT_STATIC_DIR))

    # ============================================
    # 生成后端（图片重新生成 + 剧本解析）
    # ============================================
    generation_base_url: str = Field(
        default="http://localhost:5000",
        description="默认生成后端地址，运行时可通过配置接口覆盖",
    )
    generation_endpoint: str = Field(
        default="/api/regenerate",
        description="场景重新生成 API 端点路径",
    )
    extraction_endpoint: str = Field(
        default="/api/extract",
        description="剧本（DOCX）解析 API 端点路径",
    )
    generation_api_key: str | None = None
    generation_max_retries: int = 3

    request_timeout_s: float = 120.0

    placeholder_prompt: str = Field(
        default="Prompt will appear here once JSON is loaded...",
        description="未匹配到 prompt 记录时使用的占位文本",
    )

    def generation_headers(self) -> dict[str, str]:
        """生成后端请求头"""
        headers: dict[str, str] = {"User-Agent": self.app_name}
        if self.generation_api_key:
            headers["Authorization"] = f"Bearer {self.generation_api_key}"
        return headers

    def static_path(self) -> Path:
        return Path(self.static_dir)


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=".env", _env_file_encoding="utf-8")
