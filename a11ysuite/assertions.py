class SoftAssertions:
    """
    Collect failed checks instead of stopping at the first one.

        soft = SoftAssertions()
        soft.check(result.is_valid, "Heading hierarchy should be valid")
        soft.check(aria.valid_roles, "All ARIA roles should be valid")
        soft.assert_all()
    """

    def __init__(self):
        self.failures = []

    def check(self, condition, message):
        if not condition:
            self.failures.append(message)
        return bool(condition)

    def assert_all(self):
        assert not self.failures, "Soft assertion failures:\n- " + "\n- ".join(self.failures)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.assert_all()
        return False
