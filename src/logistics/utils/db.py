"""Schema and index setup for the logistics domain.

Relational providers need their tables created before first use; the
memory provider needs nothing. The DealOrigin index is provisioned in both
cases.
"""

from protean.domain import Domain
from sqlalchemy import create_engine

_RELATIONAL_PROVIDERS = ("sqlite", "postgresql")


def _load_models(domain: Domain, provider_name: str) -> None:
    # Touching ``_dao`` registers the model with the provider's SQLAlchemy
    # metadata so ``create_all``/``drop_all`` can see it.
    for registry in (domain.registry.aggregates, domain.registry.entities, domain.registry.projections):
        for _, record in registry.items():
            if record.cls.meta_.provider == provider_name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create tables on relational providers and provision the origin index."""
    from logistics.matching.origin_index import provision_origin_index

    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] in _RELATIONAL_PROVIDERS:
                _load_models(domain, name)
                provider._metadata.create_all(create_engine(provider.conn_info["database_uri"]))

        provision_origin_index()


def drop_db(domain: Domain) -> None:
    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] in _RELATIONAL_PROVIDERS:
                _load_models(domain, name)
                provider._metadata.drop_all(create_engine(provider.conn_info["database_uri"]))
