"""
Analytics engine errors
"""


class AnalyticsComputationError(Exception):
    """A single analytics component failed; ``component`` names which one"""

    def __init__(self, component: str, cause: Exception):
        self.component = component
        self.cause = cause
        super().__init__(f"{component} computation failed: {cause}")
