"""LearnHub challenge submission engine.

The submission / mentor review / XP lifecycle of the LearnHub learning
platform, consumed in-process by the presentation layer.

Modules:
    - submissions: Submission state machine, review, reward issuance, comments
    - experience: Level and XP-progress arithmetic
    - challenges: Read-side challenge catalog views
    - stats: Dashboard metrics (completion rate, monthly growth)
    - infrastructure: Database models and async session management
"""

from learnhub.submissions.engine import SubmissionEngine

__version__ = "0.1.0"
__all__ = ["SubmissionEngine", "__version__"]
