class LearnHubError(Exception):
    """Base exception for all LearnHub errors."""
    pass

class AgentError(LearnHubError):
    """Base exception for AI agent errors."""
    pass

class TutorAgentError(AgentError):
    """Exception raised when the AI tutor cannot produce a reply."""
    pass

class MaterialAgentError(AgentError):
    """Exception raised when study material generation fails."""
    pass

class ProviderError(AgentError):
    """Exception raised when a response provider call fails."""
    pass

class CredentialsError(LearnHubError):
    """Exception raised when the chat-completion API key is missing or invalid."""
    pass

class ValidationError(LearnHubError):
    """Exception raised for invalid user input."""
    pass

class StateError(LearnHubError):
    """Exception raised for persisted-state errors."""
    pass
