"""配置加载模块 - 从环境变量和 .env 文件加载配置。"""

from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from opg_screener.types import RiskPolicy


class LogFormat(str, Enum):
    """日志格式枚举。"""

    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    """系统配置设置。

    从环境变量和 .env 文件加载配置，进程生命周期内只读。
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== 风控参数 ====================
    account_balance: float = Field(default=10_000.0, ge=0.0, description="账户余额")
    loss_tolerance: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="单笔可容忍亏损（账户余额比例）",
    )
    profit_capture: float = Field(
        default=0.8,
        gt=0.0,
        le=1.0,
        description="目标捕获的缺口比例",
    )

    # ==================== 新闻 API ====================
    seeking_alpha_url: str = Field(default="", description="新闻接口基础 URL（拼接股票代码）")
    api_key_header: str = Field(default="", description="鉴权请求头名称")
    api_key: str = Field(default="", description="鉴权请求头取值")
    news_timeout: float = Field(default=10.0, gt=0.0, description="单次新闻请求超时（秒）")
    news_max_attempts: int = Field(
        default=1,
        ge=1,
        le=5,
        description="单次新闻请求最大尝试次数（1 表示不重试）",
    )

    # ==================== 并发 ====================
    max_concurrency: int = Field(
        default=0,
        ge=0,
        description="同时进行的新闻请求上限（0 表示不限制）",
    )

    # ==================== 日志配置 ====================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="日志级别",
    )
    log_format: LogFormat = Field(
        default=LogFormat.CONSOLE,
        description="日志输出格式",
    )

    # ==================== 输入输出 ====================
    input_path: Path = Field(default=Path("opg.csv"), description="筛选器导出的 CSV")
    output_path: Path = Field(default=Path("opg.json"), description="结果 JSON 输出路径")

    @field_validator("input_path", "output_path", mode="before")
    @classmethod
    def parse_path(cls, v: str | Path) -> Path:
        """将字符串转换为 Path 对象。"""
        return Path(v) if isinstance(v, str) else v

    @property
    def max_risk_per_trade(self) -> float:
        """单笔最大亏损金额。"""
        return self.account_balance * self.loss_tolerance

    def risk_policy(self) -> RiskPolicy:
        """构建不可变的风控策略。"""
        return RiskPolicy(
            account_balance=self.account_balance,
            loss_tolerance=self.loss_tolerance,
            profit_capture=self.profit_capture,
        )

    def validate_for_news(self) -> list[str]:
        """验证新闻接口的必要配置，返回缺失项列表。"""
        missing = []
        if not self.seeking_alpha_url:
            missing.append("SEEKING_ALPHA_URL")
        if not self.api_key_header:
            missing.append("API_KEY_HEADER")
        if not self.api_key:
            missing.append("API_KEY")
        return missing


# 全局配置实例（延迟初始化）
_settings: Settings | None = None


def get_settings() -> Settings:
    """获取全局配置实例。"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

