"""Error taxonomy for spec construction, deployment and value resolution."""

from collections.abc import Mapping


class EnvcomposeError(Exception):
    """Base error carrying a message plus optional diagnostic context."""

    def __init__(self, message: str, *, context: Mapping[str, str] | None = None):
        super().__init__(message)
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        for key, value in self.context.items():
            if value:
                parts.append(f"  {key}: {value}")
        return "\n".join(parts)


class ConstructionError(EnvcomposeError):
    """Static assembly mistake: bad counts, duplicate ids, illegal state transitions."""


class DeploymentError(EnvcomposeError):
    """The orchestrator failed to apply a resource or it never became ready."""

    def __init__(self, deployable_id: str, message: str):
        super().__init__(f"{deployable_id}: {message}", context={"deployable": deployable_id})
        self.deployable_id = deployable_id


class ExternalServiceError(EnvcomposeError):
    """A companion service (release registry, explorer admin API) returned an error."""

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}", context={"service": service})
        self.service = service


class ResolutionError(EnvcomposeError):
    """A post-deploy hook failed.

    ``path`` is the chain of ids from the outermost group that has seen the
    error down to the deployable whose hook failed. Enclosing groups prepend
    their own id via :meth:`within` as the error propagates.
    """

    def __init__(self, path: list[str], cause: BaseException | str):
        self.path = list(path)
        self.cause = cause
        super().__init__(
            f"resolution of '{self.qualified_id}' failed: {cause}",
            context={"deployable": self.qualified_id},
        )

    @property
    def qualified_id(self) -> str:
        return "/".join(self.path)

    def within(self, group_id: str) -> "ResolutionError":
        """Return a copy of this error scoped under an enclosing group."""
        return ResolutionError([group_id, *self.path], self.cause)
