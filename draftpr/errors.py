"""Error taxonomy. Every DraftError ends the run with a message and exit status 0."""


class TrackerError(RuntimeError):
    """Raised by providers when gh or the GitHub API call fails."""


class DraftError(RuntimeError):
    """A step of the draft run failed. The message is shown to the operator as-is."""


class ConfigError(DraftError):
    pass


class ToolMissing(DraftError):
    pass


class NotAuthenticated(DraftError):
    pass


class DirtyWorkingTree(DraftError):
    pass


class NoRemoteOrBranch(DraftError):
    pass


class NoIdentifierFound(DraftError):
    pass


class IssueFetchFailed(DraftError):
    pass


class SequencePredictionFailed(DraftError):
    pass


class PluginExecutionFailed(DraftError):
    pass


class PushFailed(DraftError):
    pass


class PullRequestCreationFailed(DraftError):
    pass


class TemplateRenderFailed(DraftError):
    pass
