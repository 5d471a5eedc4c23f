"""
Consumer side of the attempt API: the interactive session loop and the
backends it talks to.
"""

from .backends import LocalAttemptBackend, QuizApiClient
from .controller import AttemptSessionController, LocalAnswer

__all__ = [
    "AttemptSessionController",
    "LocalAnswer",
    "LocalAttemptBackend",
    "QuizApiClient",
]
