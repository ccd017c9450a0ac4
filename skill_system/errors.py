class SkillSystemError(Exception):
    """Base class for every error raised by the skill tree engine."""


class UnknownSkillError(SkillSystemError, KeyError):
    """A progress update referenced a skill id that is not in the catalog."""

    def __init__(self, skill_id: str):
        self.skill_id = skill_id
        super().__init__(skill_id)

    def __str__(self):
        return f"Unknown skill '{self.skill_id}'"


class MalformedProgressImport(SkillSystemError, ValueError):
    """
    Imported progress data is not a well-formed mapping of progress records.
    The import is rejected as a whole; `errors` lists what was wrong.
    """

    def __init__(self, message: str, errors=None):
        self.errors = list(errors or [])
        super().__init__(message)


class CycleDetected(SkillSystemError):
    """The prerequisite relation of a catalog is not acyclic."""

    def __init__(self, skill_ids):
        self.skill_ids = sorted(skill_ids)
        super().__init__(
            "Cyclic prerequisites between skills: " + ", ".join(self.skill_ids)
        )
