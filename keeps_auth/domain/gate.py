"""Session gate - decides whether a caller may enter the protected area."""


def can_proceed(
    has_session: bool,
    verified: bool,
    dev_bypass_enabled: bool,
    is_dev_environment: bool,
) -> bool:
    """
    Return True when a session may proceed to the protected area.

    An unverified account only passes when the dev bypass is enabled
    AND the runtime environment is development.
    """
    return has_session and (verified or (dev_bypass_enabled and is_dev_environment))
