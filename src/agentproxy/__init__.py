"""agentproxy: policy-enforced SQL preview/commit for AI agents."""

__version__ = "0.1.0"
