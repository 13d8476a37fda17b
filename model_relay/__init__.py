"""Model Relay

Routes chat-completion requests across LLM providers with priority routing,
per-model API key rotation and single-pass failover.
"""

from importlib.metadata import PackageNotFoundError, version

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

try:
    __version__ = version("model-relay")
except PackageNotFoundError:
    # Fallback for source checkouts
    __version__ = "1.0.0"
__author__ = "Model Relay"
