class GrowthError(Exception):
    pass


class NotFoundError(GrowthError):
    def __init__(self, kind: str, ref: str):
        self.kind = kind
        self.ref = ref
        super().__init__(f"No {kind} found: '{ref}'")


class ValidationError(GrowthError):
    pass


class ConflictError(GrowthError):
    pass


class StateError(GrowthError):
    pass


class AmbiguousError(GrowthError):
    def __init__(self, ref: str, count: int = 0, sample: list[str] | None = None):
        self.ref = ref
        self.count = count
        self.sample = sample or []
        count_note = f" ({count})" if count else ""
        note = f": {', '.join(self.sample)}" if self.sample else ""
        super().__init__(f"ambiguous ref '{ref}' matches multiple items{count_note}{note}")
