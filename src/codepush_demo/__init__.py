"""
CodePushDemo - generate CodePushified React Native demo apps
"""
from .codepush import DeploymentKeys, RegistrationResult, fetch_deployment_keys
from .errors import CodePushDemoError, CodePushError, LinkError
from .linker import PromptExchange, drive_prompts, link_codepush

__version__ = "0.1.0"

__all__ = [
    'DeploymentKeys', 'RegistrationResult', 'fetch_deployment_keys',
    'CodePushDemoError', 'CodePushError', 'LinkError',
    'PromptExchange', 'drive_prompts', 'link_codepush',
]
