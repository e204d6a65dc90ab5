"""
Keyword tables and fixed checklist content for DoD generation.

All tables are immutable and keyed by TicketType. The generator branches on
these tables only; there is no per-type behavior beyond the data here.
"""
from types import MappingProxyType
from typing import Mapping, Tuple
from dod_agent.models.enums import ReviewStatus, TicketType

# (row category, row items)
RowSpec = Tuple[str, Tuple[str, ...]]
# (section title, row)
SectionSpec = Tuple[str, RowSpec]


class ClassificationRules:
    """Tables used to infer a ticket type from labels and text."""

    # Checked in this order; a ticket labelled both backend and frontend resolves to backend
    TYPE_PRIORITY: Tuple[TicketType, ...] = (
        TicketType.BACKEND,
        TicketType.FRONTEND,
        TicketType.INFRASTRUCTURE,
    )

    LABEL_SYNONYMS: Mapping[TicketType, Tuple[str, ...]] = MappingProxyType({
        TicketType.BACKEND: ("backend", "back-end", "api", "server", "database", "db"),
        TicketType.FRONTEND: ("frontend", "front-end", "ui", "ux", "client", "web"),
        TicketType.INFRASTRUCTURE: ("infrastructure", "infra", "devops", "deployment", "ci/cd", "cicd"),
    })

    TEXT_KEYWORDS: Mapping[TicketType, Tuple[str, ...]] = MappingProxyType({
        TicketType.BACKEND: (
            "api", "endpoint", "rest", "graphql", "database", "sql", "migration",
            "server", "backend", "microservice", "service",
        ),
        TicketType.FRONTEND: (
            "ui", "ux", "component", "react", "vue", "angular", "frontend",
            "button", "form", "page", "view", "css", "html", "styling",
        ),
        TicketType.INFRASTRUCTURE: (
            "infrastructure", "deployment", "ci/cd", "pipeline", "docker",
            "kubernetes", "k8s", "terraform", "ansible", "devops", "monitoring", "logging",
        ),
    })

    DEFAULT_TYPE: TicketType = TicketType.BACKEND


class ContentSignals:
    """Substring signals searched in summary + description (case-insensitive)."""

    API_TERMS: Tuple[str, ...] = (
        "api", "endpoint", "rest", "graphql", "http", "request", "response",
        "webhook", "microservice",
    )

    DATA_TERMS: Tuple[str, ...] = (
        "database", "schema", "migration", "data", "table", "column", "index",
        "query", "sql", "nosql", "collection", "document",
    )

    FEATURE_TERMS: Tuple[str, ...] = (
        "new feature", "feature", "user story", "enhancement", "capability",
    )

    FEATURE_ISSUE_TYPE = "story"


class ChecklistContent:
    """Fixed row and section content of the generated document."""

    ACCEPTANCE_CRITERIA_TITLE = "Acceptance Criteria"
    AUTOMATED_TESTS_TITLE = "Automated Tests"
    MANUAL_TESTS_TITLE = "Manual Test Steps"
    DOCUMENTATION_TITLE = "Documentation Updates"
    CI_TITLE = "Continuous Integration"
    REVIEWER_CHECKLIST_TITLE = "Reviewer Checklist"

    MANDATORY_TITLES: Tuple[str, ...] = (
        ACCEPTANCE_CRITERIA_TITLE,
        AUTOMATED_TESTS_TITLE,
        MANUAL_TESTS_TITLE,
        DOCUMENTATION_TITLE,
        CI_TITLE,
    )

    CRITERIA_PLACEHOLDER = "Manual review needed - no explicit acceptance criteria found"

    AUTOMATED_TEST_ROWS: Mapping[TicketType, Tuple[RowSpec, ...]] = MappingProxyType({
        TicketType.BACKEND: (
            ("Unit Tests", ("Write comprehensive unit tests for business logic, services, and utilities",)),
            ("Integration Tests", (
                "Write integration tests for API endpoints, database interactions, "
                "and external service integrations",
            )),
            ("End-to-End Tests", ("Write e2e tests for critical user flows",)),
        ),
        TicketType.FRONTEND: (
            ("Component Tests", ("Write component tests for UI components, props, state, and user interactions",)),
            ("Integration Tests", ("Write integration tests for component interactions and data flow",)),
            ("End-to-End Tests", ("Write comprehensive e2e tests for user workflows and critical paths",)),
        ),
    })

    DEFAULT_AUTOMATED_TEST_ROWS: Tuple[RowSpec, ...] = (
        ("Unit Tests", ("Write unit tests for new/modified functions and classes",)),
        ("Integration Tests", ("Write integration tests for component interactions",)),
        ("End-to-End Tests", ("Write e2e tests for critical user flows",)),
    )

    API_CONTRACT_TESTING_ROW: RowSpec = (
        "API Contract Testing",
        ("Write tests to verify API contracts, request/response schemas, and endpoint behavior",),
    )

    MANUAL_TEST_ROWS: Mapping[TicketType, RowSpec] = MappingProxyType({
        TicketType.BACKEND: ("Manual Testing", (
            "Test API endpoints with various input scenarios (valid, invalid, edge cases)",
            "Verify response status codes and error messages",
            "Test authentication and authorization flows",
        )),
        TicketType.FRONTEND: ("Manual Testing", (
            "Test UI interactions across different browsers (Chrome, Firefox, Safari)",
            "Verify responsive design on various screen sizes (mobile, tablet, desktop)",
            "Test keyboard navigation and focus management",
            "Verify visual appearance matches design specifications",
        )),
    })

    DEFAULT_MANUAL_TEST_ROW: RowSpec = ("Manual Testing", ("Describe and execute manual test scenarios",))

    DATA_VALIDATION_ROW: RowSpec = ("Data Validation", (
        "Verify data integrity after changes",
        "Test data migration scripts if applicable",
        "Validate data transformations and schema changes",
    ))

    DOCUMENTATION_CATEGORY = "Documentation"
    BASE_DOCUMENTATION_ITEMS: Tuple[str, ...] = (
        "Update relevant documentation (README, API docs, etc.)",
    )
    RUNBOOK_ITEMS: Tuple[str, ...] = (
        "Update runbooks with new procedures or configuration changes",
        "Document troubleshooting steps for common issues",
    )
    USER_DOCUMENTATION_ITEMS: Tuple[str, ...] = (
        "Update user-facing documentation for new features",
        "Create or update user guides and tutorials",
    )

    CI_CATEGORY = "CI Pipeline"
    CI_PLACEHOLDER = "Verify CI pipeline passes before merging"

    TYPE_SECTIONS: Mapping[TicketType, Tuple[SectionSpec, ...]] = MappingProxyType({
        TicketType.BACKEND: (
            ("API Contract Changes", ("API Documentation", (
                "Document new or modified API endpoints (request/response schemas)",
                "Update API versioning if breaking changes introduced",
                "Update OpenAPI/Swagger specifications if applicable",
            ))),
            ("Monitoring and Logging", ("Observability", (
                "Add appropriate logging for new functionality (info, warn, error levels)",
                "Add metrics/monitoring for critical operations",
                "Ensure sensitive data is not logged",
            ))),
            ("Rollback and Migration Notes", ("Deployment Safety", (
                "Document rollback procedure if deployment fails",
                "Ensure database migrations are reversible",
                "Document any manual steps required for deployment",
            ))),
        ),
        TicketType.FRONTEND: (
            ("UI/UX Validation", ("Design Compliance", (
                "Verify UI matches design mockups and specifications",
                "Ensure consistent styling with design system/style guide",
                "Validate spacing, typography, and color usage",
                "Test animations and transitions for smoothness",
            ))),
            ("Accessibility Compliance", ("A11y Requirements", (
                "Ensure proper semantic HTML structure",
                "Verify ARIA labels and roles are correctly applied",
                "Test keyboard navigation and focus indicators",
                "Verify sufficient color contrast ratios (WCAG AA)",
                "Test with screen readers (NVDA, JAWS, VoiceOver)",
            ))),
        ),
        TicketType.INFRASTRUCTURE: (
            ("Deployment Procedures", ("Deployment Steps", (
                "Document step-by-step deployment procedure",
                "Verify deployment can be executed without manual intervention",
                "Test deployment in staging environment before production",
                "Document rollback procedure in case of deployment failure",
            ))),
            ("Infrastructure Validation", ("Infrastructure Testing", (
                "Verify infrastructure changes work as expected in test environment",
                "Validate resource limits and scaling configurations",
                "Test monitoring and alerting for infrastructure components",
                "Verify backup and disaster recovery procedures",
                "Confirm security configurations and access controls",
            ))),
        ),
    })

    REVIEWER_CHECKLIST_ROW: RowSpec = ("Code Review", (
        "Code follows project style guidelines",
        "No obvious bugs or code smells",
        "Tests are comprehensive and passing",
        "Documentation is clear and complete",
    ))


# (glyph, display label) per merge request status
CI_STATUS_DISPLAY: Mapping[ReviewStatus, Tuple[str, str]] = MappingProxyType({
    ReviewStatus.SUCCEEDED: ("✓", "passed"),
    ReviewStatus.FAILED: ("✗", "failed"),
    ReviewStatus.RUNNING: ("⟳", "running"),
    ReviewStatus.QUEUED: ("⏳", "pending"),
    ReviewStatus.ABORTED: ("⊘", "canceled"),
})
UNKNOWN_STATUS_GLYPH = "?"
