"""Architectural boundary tests using pytest-archon.

These tests verify the layering of the codebase:
- Domain layer has no dependencies on adapters or application services
- Application services don't depend on adapters
- Adapters can depend on domain but not on application services
- The command-line tool does not pull in the web server
"""

from pytest_archon import archrule


def test_domain_models_have_no_dependencies() -> None:
    """Domain models should not import any other modules except standard library and domain itself."""
    (
        archrule("domain models", comment="Domain models should be independent")
        .match("portal_sync.domain.models*")
        .should_not_import("portal_sync.adapters*")
        .should_not_import("portal_sync.application*")
        .should_not_import("portal_sync.domain.contracts*")
        .should_not_import("portal_sync.domain.ports*")
        .may_import("portal_sync.domain.models*")
        .check("portal_sync")
    )


def test_domain_contracts_have_no_dependencies() -> None:
    """Domain contracts (protocols/interfaces) should not import adapters or application."""
    (
        archrule("domain contracts", comment="Domain contracts should be independent")
        .match("portal_sync.domain.contracts*")
        .should_not_import("portal_sync.adapters*")
        .should_not_import("portal_sync.application*")
        .may_import("portal_sync.domain.contracts*")
        .may_import("portal_sync.domain.models*")
        .may_import("portal_sync.domain.ports*")
        .check("portal_sync")
    )


def test_domain_ports_have_no_dependencies() -> None:
    """Domain ports (interfaces) should not import adapters or application."""
    (
        archrule("domain ports", comment="Domain ports should be independent")
        .match("portal_sync.domain.ports*")
        .should_not_import("portal_sync.adapters*")
        .should_not_import("portal_sync.application*")
        .may_import("portal_sync.domain.ports*")
        .may_import("portal_sync.domain.models*")
        .check("portal_sync")
    )


def test_application_services_dont_import_adapters() -> None:
    """Application services should not depend on adapters (infrastructure layer)."""
    (
        archrule(
            "application services", comment="Application services should not depend on adapters"
        )
        .match("portal_sync.application*")
        .should_not_import("portal_sync.adapters*")
        .should_not_import("aiohttp")
        .should_not_import("starlette*")
        .may_import("portal_sync.domain*")
        .may_import("portal_sync.application*")
        .check("portal_sync")
    )


def test_adapters_dont_import_application() -> None:
    """Adapters should not import application services (to avoid cycles)."""
    (
        archrule(
            "adapters independence", comment="Adapters should not depend on application services"
        )
        .match("portal_sync.adapters*")
        .should_not_import("portal_sync.application*")
        .may_import("portal_sync.domain*")
        .may_import("portal_sync.adapters*")
        .check("portal_sync", only_direct_imports=True)
    )


def test_no_circular_dependencies_in_domain() -> None:
    """Domain layer should not import outer layers."""
    (
        archrule("domain no cycles", comment="Domain layer should not have outer dependencies")
        .match("portal_sync.domain*")
        .should_not_import("portal_sync.adapters*")
        .should_not_import("portal_sync.application*")
        .may_import("portal_sync.domain*")
        .check("portal_sync", only_direct_imports=True)
    )


def test_cli_dont_import_web_adapters() -> None:
    """CLI should not import web adapters to allow running CLI without web server."""
    (
        archrule("CLI independence", comment="CLI should not depend on web adapters")
        .match("portal_sync.cli")
        .should_not_import("portal_sync.adapters.web*")
        .should_not_import("portal_sync.adapters.supabase*")
        .may_import("portal_sync.domain*")
        .may_import("portal_sync.adapters.config*")
        .may_import("portal_sync.adapters.mcss_api*")
        .check("portal_sync")
    )
