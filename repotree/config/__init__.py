from .loader import load_config
from .models import RepoTreeConfig, TreeConfig, VCSConfig

__all__ = [
    "RepoTreeConfig",
    "TreeConfig",
    "VCSConfig",
    "load_config",
]
