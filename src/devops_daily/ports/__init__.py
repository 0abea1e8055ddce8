from .chat import ChatClient
from .classifier import Classifier
from .fetcher import Fetcher
from .git import GitClient
from .logger import RunLogger
from .summarizer import Summarizer

__all__ = [
    "ChatClient",
    "Classifier",
    "Fetcher",
    "GitClient",
    "RunLogger",
    "Summarizer",
]
