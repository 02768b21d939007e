"""
配置加载模块
Config Loading Module

YAML 配置文件加载、.env 环境变量载入与 ${VAR} / ${VAR:default} 占位符替换。
Loads the YAML config file, the .env file and substitutes ${VAR} /
${VAR:default} placeholders.

相关度门槛、聚类阈值、趋势比例和关联权重是固定常量，不在配置中。
The relevance gate, cluster thresholds, trend ratios and relation weights
are fixed constants, not configuration.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

ENV_VAR_PATTERN = re.compile(r'\$\{([^}:]+)(?::([^}]*))?\}')


def load_env_file(env_path: str | None = None) -> bool:
    """
    加载.env文件中的环境变量。
    Load environment variables from .env file.

    Args:
        env_path: .env文件路径，默认为None（自动查找）
                  Path to .env file, defaults to None (auto-discover)

    Returns:
        是否成功加载了.env文件
        Whether .env file was successfully loaded
    """
    if env_path:
        env_file = Path(env_path)
        if env_file.exists():
            load_dotenv(env_file)
            return True
        return False

    return load_dotenv()


def replace_env_vars(value: Any) -> Any:
    """
    递归替换配置值中的环境变量占位符。
    Recursively substitute environment variable placeholders in config values.

    环境变量不存在且没有默认值时替换为空字符串。

    Examples:
        >>> os.environ['KB_PATH'] = 'data/kb.json'
        >>> replace_env_vars('${KB_PATH}')
        'data/kb.json'
        >>> replace_env_vars({'path': '${MISSING_VAR:fallback}'})
        {'path': 'fallback'}
    """
    if isinstance(value, str):
        def replacer(match: re.Match) -> str:
            default_value = match.group(2) if match.group(2) is not None else ''
            return os.environ.get(match.group(1), default_value)

        return ENV_VAR_PATTERN.sub(replacer, value)

    if isinstance(value, dict):
        return {k: replace_env_vars(v) for k, v in value.items()}

    if isinstance(value, list):
        return [replace_env_vars(item) for item in value]

    return value


def load_config(config_path: str = "config.yaml", env_path: str | None = None) -> dict:
    """
    加载YAML配置文件并替换环境变量。
    Load YAML config file and substitute environment variables.

    Raises:
        FileNotFoundError: 配置文件不存在
        yaml.YAMLError: YAML解析错误
    """
    load_env_file(env_path)

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"配置文件不存在: {config_path}")

    with open(config_file, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}

    return replace_env_vars(config)


def get_config_value(config: dict, key_path: str, default: Any = None) -> Any:
    """
    通过点分隔的路径获取配置值。
    Get config value by dot-separated path.

    Examples:
        >>> get_config_value({'search': {'top_k': 5}}, 'search.top_k')
        5
        >>> get_config_value({}, 'search.top_k', 3)
        3
    """
    value = config
    for key in key_path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


# 默认配置值
# Default Configuration Values
DEFAULT_CONFIG: dict[str, Any] = {
    'knowledge_base': {
        'path': 'data/knowledge-base.json',
    },
    'vector_store': {
        'path': 'data/vectors/index.json',
    },
    'search': {
        'top_k': 5,
        'min_score': 0.1,
        'include_snippets': True,
    },
    'connections': {
        'min_score': 0.15,
    },
    'trends': {
        'hot_topic_days': 30,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """
    深度合并两个字典，override中的值覆盖base中的值。
    Deep merge two dictionaries, values in override take precedence over base.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def apply_defaults(config: dict) -> dict:
    """
    将默认配置应用到用户配置中，缺失的配置项使用默认值。
    Apply default configuration to user config, missing items use defaults.

    Examples:
        >>> apply_defaults({'search': {'top_k': 10}})['search']['min_score']
        0.1
    """
    return _deep_merge(DEFAULT_CONFIG, config)


def load_config_with_defaults(config_path: str = "config.yaml", env_path: str | None = None) -> dict:
    """
    加载配置文件并应用默认值。
    Load configuration file and apply defaults.
    """
    return apply_defaults(load_config(config_path, env_path))


@dataclass
class SearchConfig:
    """
    搜索配置

    Attributes:
        top_k: 默认返回数量
        min_score: 最低得分 [0, 1]
        include_snippets: 是否提取相关片段
    """
    top_k: int = 5
    min_score: float = 0.1
    include_snippets: bool = True

    def validate(self) -> None:
        """
        验证配置参数

        Raises:
            ValueError: 当参数值不在有效范围内时
        """
        if self.top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {self.top_k}")
        if not 0 <= self.min_score <= 1:
            raise ValueError(f"min_score must be in [0, 1], got {self.min_score}")

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "top_k": self.top_k,
            "min_score": self.min_score,
            "include_snippets": self.include_snippets,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchConfig":
        """从字典创建配置"""
        return cls(
            top_k=int(data.get("top_k", 5)),
            min_score=float(data.get("min_score", 0.1)),
            include_snippets=bool(data.get("include_snippets", True)),
        )


def get_search_config(config: dict) -> SearchConfig:
    """
    获取搜索配置，自动应用默认值并验证。
    Get the search configuration with defaults applied and validated.

    Raises:
        ValueError: 配置值无效
    """
    merged = _deep_merge(DEFAULT_CONFIG['search'], config.get('search') or {})
    search_config = SearchConfig.from_dict(merged)
    search_config.validate()
    return search_config
