"""Domain services: stateless operations spanning several aggregates."""

from domainkit.services.base import DomainService, DomainServiceFactory, domain_service

__all__ = ["DomainService", "DomainServiceFactory", "domain_service"]
