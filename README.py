"""
Test Manager API

FastAPI backend for managing test assets and deciding whether a release may ship.

Architecture Overview:
- Clean Architecture with clear separation of concerns
- Repository pattern for data access
- Dependency Injection for loose coupling
- Interface-based design, with SQLAlchemy implementations

Key Features:
- Test cases with immutable, numbered revisions
- Scenarios and scenario lists built from approved revisions
- Review workflow: DRAFT -> IN_REVIEW -> APPROVED or DEPRECATED
- Test runs expanded from a scenario list, with results and evidence
- JUnit XML import from CI
- Release baselines, gate evaluation and time-limited waivers
- Structured JSON logging and typed error responses
- Optional bearer token authentication (HS256 JWT)

Usage:
1. Copy .env.example to .env and adjust it
2. Install dependencies: pip install -e ".[test]"
3. Run the application: python main.py
4. Access API docs at: http://localhost:8000/api/v1/docs
5. Issue a development token: python scripts/issue_token.py alice --role qa

API Endpoints:
- POST /api/v1/projects, GET /api/v1/projects
- POST /api/v1/requirements, POST /api/v1/requirements/{id}/mappings
- POST /api/v1/test-cases, GET /api/v1/test-cases?project_id=...
- POST /api/v1/test-cases/{id}/revisions, GET /api/v1/test-cases/{id}/revisions
- POST /api/v1/test-cases/revisions/{id}/submit-for-review
- POST /api/v1/test-scenarios, POST /api/v1/test-scenario-lists
- POST /api/v1/approvals, GET /api/v1/approvals?object_type=...&object_id=...
- POST /api/v1/test-run-groups, GET /api/v1/test-run-groups/{id}/progress
- POST /api/v1/test-runs, POST /api/v1/test-runs/{id}/start
- POST /api/v1/test-runs/{id}/items/{item_id}/results
- POST /api/v1/test-runs/{id}/complete, POST /api/v1/test-runs/{id}/ci-results
- POST /api/v1/releases, PATCH /api/v1/releases/{id}/status
- POST /api/v1/releases/{id}/baselines
- POST /api/v1/releases/{id}/gate-evaluation
- POST /api/v1/releases/{id}/waivers, DELETE /api/v1/waivers/{id}
- POST /api/v1/waivers/expire-check
- GET /api/v1/health, GET /api/v1/health/readiness

Architecture Components:

1. Controllers (app/api/routes/):
   - Handle HTTP requests and responses
   - Input validation using Pydantic
   - Wrap results in {"data": ..., "message": ...} envelopes

2. Services (app/services/):
   - Business rules and status transitions
   - Orchestrate repository operations
   - Raise typed errors from app/core/errors.py

3. Repositories (app/repositories/):
   - Data access layer
   - Interface-based design for testability
   - SQLAlchemy implementations, including the gate evaluation queries

4. Models (app/models/):
   - Pydantic schemas for request/response
   - SQLAlchemy models for database
   - Status transition tables and gate defaults

5. Core (app/core/):
   - Database configuration
   - Dependency injection
   - Errors, timestamps and authentication

6. Configuration (app/config/):
   - Environment-based settings
   - Type-safe configuration management
"""

__version__ = "1.0.0"
__author__ = "Team Chai"
__description__ = "Test case revisions, test execution and release gates"
