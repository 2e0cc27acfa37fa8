"""Domain services.

Some domain logic belongs to no single entity or value object, e.g.
transferring funds between two accounts.  A domain service groups such
operations and receives its collaborators (repositories, gateways, other
services) by injection.

    def transfer(self, source_id, target_id, amount):
        ...  # self.accounts is the injected repository

    Transfers = domain_service(
        name="Transfers",
        dependencies={"accounts": "Account repository", "audit": None},
        operations={"transfer": transfer},
    )
    transfers = Transfers.create(accounts=account_repository)

A dependency declared with ``None`` is optional; any other value (usually
a short description) marks it as required.
"""

from __future__ import annotations

import logging
import types
from collections.abc import Callable, Mapping
from dataclasses import FrozenInstanceError
from typing import Any

from domainkit.core.errors import ConfigurationError, DomainServiceError

logger = logging.getLogger(__name__)

Operation = Callable[..., Any]

RESERVED_NAMES = frozenset({"service_name", "dependencies"})


class DomainService:
    """A frozen service instance.

    Operations are bound on access with the service itself as ``self``.
    Injected dependencies are readable as attributes and through
    ``dependencies``.
    """

    __slots__ = ("_name", "_dependencies", "_operations")

    def __init__(
        self,
        name: str,
        dependencies: Mapping[str, Any],
        operations: Mapping[str, Operation],
    ) -> None:
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_dependencies", types.MappingProxyType(dict(dependencies)))
        object.__setattr__(self, "_operations", types.MappingProxyType(dict(operations)))

    def __getattr__(self, item: str) -> Any:
        if item.startswith("_"):
            raise AttributeError(item)
        operation = self._operations.get(item)
        if operation is not None:
            return types.MethodType(operation, self)
        if item in self._dependencies:
            return self._dependencies[item]
        raise AttributeError(f"{self._name} has no operation or dependency '{item}'")

    def __setattr__(self, key: str, value: Any) -> None:
        raise FrozenInstanceError(f"cannot assign to '{key}' of service {self._name}")

    def __delattr__(self, key: str) -> None:
        raise FrozenInstanceError(f"cannot delete '{key}' of service {self._name}")

    def __dir__(self) -> list[str]:
        return sorted({*super().__dir__(), *self._operations, *self._dependencies})

    def __repr__(self) -> str:
        return (
            f"DomainService(name={self._name!r}, operations={sorted(self._operations)!r}, "
            f"dependencies={sorted(self._dependencies)!r})"
        )

    @property
    def service_name(self) -> str:
        return self._name

    @property
    def dependencies(self) -> Mapping[str, Any]:
        return self._dependencies


class DomainServiceFactory:
    """Builds ``DomainService`` instances of one kind."""

    def __init__(
        self,
        name: str,
        operations: Mapping[str, Operation],
        dependencies: Mapping[str, Any] | None = None,
    ) -> None:
        if not name:
            raise ConfigurationError("Domain service name is required")
        if not isinstance(operations, Mapping) or not operations:
            raise ConfigurationError(f"Domain service {name}: operations are required")
        for op_name, op in operations.items():
            if not callable(op):
                raise ConfigurationError(
                    f"Domain service {name}: operation '{op_name}' must be callable"
                )
        dependencies = dict(dependencies or {})
        clashes = sorted((set(operations) | set(dependencies)) & RESERVED_NAMES)
        if clashes:
            raise ConfigurationError(
                f"Domain service {name}: {', '.join(clashes)} shadow the service API"
            )
        shared = sorted(set(operations) & set(dependencies))
        if shared:
            raise ConfigurationError(
                f"Domain service {name}: {', '.join(shared)} named both operation and dependency"
            )

        self._name = name
        self._operations = types.MappingProxyType(dict(operations))
        self._dependencies = types.MappingProxyType(dependencies)

    def __repr__(self) -> str:
        return f"DomainServiceFactory(name={self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def operations(self) -> Mapping[str, Operation]:
        return self._operations

    @property
    def dependencies(self) -> Mapping[str, Any]:
        return self._dependencies

    def create(
        self, dependencies: Mapping[str, Any] | None = None, **injected: Any
    ) -> DomainService:
        """Inject ``dependencies`` (mapping and/or keywords) into a new service.

        Declared dependencies that are not injected read as ``None``.

        Raises:
            DomainServiceError: a required dependency is missing or ``None``.
        """
        provided = {
            **dict.fromkeys(self._dependencies),
            **(dependencies or {}),
            **injected,
        }
        missing = [
            dep
            for dep, declared in self._dependencies.items()
            if declared is not None and provided.get(dep) is None
        ]
        if missing:
            raise DomainServiceError(
                f"Missing required dependencies for {self._name}: {', '.join(missing)}",
                context={"service": self._name, "missing_dependencies": missing},
            )
        service = DomainService(self._name, provided, self._operations)
        logger.debug("Created domain service %s", self._name)
        return service

    def extend(
        self,
        name: str,
        operations: Mapping[str, Operation] | None = None,
        dependencies: Mapping[str, Any] | None = None,
    ) -> DomainServiceFactory:
        """Derive a new service kind; new operations and dependencies win."""
        if not name:
            raise ConfigurationError("Extended domain service name is required")
        return DomainServiceFactory(
            name=name,
            operations={**self._operations, **(operations or {})},
            dependencies={**self._dependencies, **(dependencies or {})},
        )


def domain_service(
    *,
    name: str,
    operations: Mapping[str, Operation],
    dependencies: Mapping[str, Any] | None = None,
) -> DomainServiceFactory:
    """Keyword builder for ``DomainServiceFactory``."""
    return DomainServiceFactory(name=name, operations=operations, dependencies=dependencies)
