class DevOpsDailyError(Exception):
    """Base error for the DevOps Daily tooling."""


class ConfigError(DevOpsDailyError):
    pass


class ContentError(DevOpsDailyError):
    pass


class FrontmatterError(ContentError):
    pass


class FetchError(DevOpsDailyError):
    pass


class GenerationError(DevOpsDailyError):
    pass


class DigestValidationError(DevOpsDailyError):
    pass


class GitError(DevOpsDailyError):
    pass
