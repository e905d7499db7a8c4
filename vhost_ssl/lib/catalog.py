"""Resource catalog: declaration, dependency ordering and application."""

from collections.abc import Iterator
from graphlib import CycleError, TopologicalSorter

from vhost_ssl.lib.errors import (
    DependencyCycleError,
    DuplicateResourceError,
    UnknownResourceError,
    VhostSSLError,
)
from vhost_ssl.lib.logging_config import LOGGER
from vhost_ssl.lib.models import RunReport
from vhost_ssl.lib.resources import ApplyContext, Resource


class Catalog:
    """Declared resources of one run, keyed by ref.

    Ordering comes only from edges: ``require`` puts the required resource
    first, ``notify`` puts the notifier first.
    """

    def __init__(self) -> None:
        self._resources: dict[str, Resource] = {}

    def __contains__(self, ref: str) -> bool:
        return ref in self._resources

    def __getitem__(self, ref: str) -> Resource:
        return self._resources[ref]

    def __iter__(self) -> Iterator[Resource]:
        return iter(self._resources.values())

    def __len__(self) -> int:
        return len(self._resources)

    def add(self, resource: Resource) -> Resource:
        """Declare a resource.

        Raises:
            DuplicateResourceError: If the ref is already declared
        """
        if resource.ref in self._resources:
            raise DuplicateResourceError(f"duplicate declaration of {resource.ref}")
        self._resources[resource.ref] = resource
        return resource

    def include(self, resource: Resource) -> Resource:
        """Declare a resource shared between units, once.

        An identical earlier declaration is returned as is; a conflicting one
        raises DuplicateResourceError.
        """
        existing = self._resources.get(resource.ref)
        if existing is None:
            return self.add(resource)
        if existing != resource:
            raise DuplicateResourceError(f"conflicting declarations of {resource.ref}")
        return existing

    def graph(self) -> dict[str, set[str]]:
        """Return predecessor sets for every declared ref.

        Raises:
            UnknownResourceError: If an edge names an undeclared ref
        """
        graph: dict[str, set[str]] = {ref: set() for ref in self._resources}
        for ref, resource in self._resources.items():
            for required in resource.require:
                if required not in self._resources:
                    raise UnknownResourceError(f"{ref} requires undeclared {required}")
                graph[ref].add(required)
            for target in resource.notify:
                if target not in self._resources:
                    raise UnknownResourceError(f"{ref} notifies undeclared {target}")
                graph[target].add(ref)
        return graph

    def order(self) -> list[str]:
        """Return refs in a dependency-respecting order.

        Raises:
            DependencyCycleError: If the edges form a cycle
        """
        try:
            return list(TopologicalSorter(self.graph()).static_order())
        except CycleError as e:
            raise DependencyCycleError(f"dependency cycle: {' -> '.join(e.args[1])}") from e

    def apply(self, context: ApplyContext | None = None) -> RunReport:
        """Converge every resource, serially, in dependency order.

        A failed resource is recorded and everything depending on it, directly
        or transitively, is skipped. Independent resources still converge.
        """
        context = context or ApplyContext()
        graph = self.graph()
        report = RunReport()
        notified: set[str] = set()
        broken: set[str] = set()

        for ref in self.order():
            resource = self._resources[ref]
            blocked = graph[ref] & broken
            if blocked:
                LOGGER.warning(
                    "Skipping %s, dependencies failed: %s",
                    ref,
                    ", ".join(sorted(blocked)),
                    extra={"resource": ref},
                )
                report.skipped.append(ref)
                broken.add(ref)
                continue

            try:
                changed = resource.apply(context)
                if ref in notified:
                    changed = resource.refresh(context) or changed
            except (VhostSSLError, OSError, LookupError) as e:
                LOGGER.error("%s failed: %s", ref, e, extra={"resource": ref})
                report.failed[ref] = str(e)
                broken.add(ref)
                continue

            if changed:
                report.changed.append(ref)
                notified.update(resource.notify)
            else:
                report.unchanged.append(ref)

        LOGGER.info(
            "Run finished: %d changed, %d unchanged, %d failed, %d skipped",
            len(report.changed),
            len(report.unchanged),
            len(report.failed),
            len(report.skipped),
        )
        return report
