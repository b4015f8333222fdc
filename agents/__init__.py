from .exceptions import (
    LearnHubError,
    AgentError,
    TutorAgentError,
    MaterialAgentError,
    ProviderError,
    CredentialsError,
    ValidationError,
    StateError
)
from .providers import ResponseProvider, OpenRouterProvider, CannedResponseProvider
from .tutor_agent import TutorAgent, ChatMessage
from .material_agent import StudyMaterialGenerator, StudyMaterial

__all__ = [
    'ResponseProvider',
    'OpenRouterProvider',
    'CannedResponseProvider',
    'TutorAgent',
    'ChatMessage',
    'StudyMaterialGenerator',
    'StudyMaterial',
    'LearnHubError',
    'AgentError',
    'TutorAgentError',
    'MaterialAgentError',
    'ProviderError',
    'CredentialsError',
    'ValidationError',
    'StateError'
]
