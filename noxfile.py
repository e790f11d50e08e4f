"""Nox configuration for testing and linting the upset harvester."""

import nox

nox.options.sessions = ["tests", "lint"]
python_versions = ["3.11", "3.12"]

PACKAGES = ("startgg_client", "upset_finder")


@nox.session(python=python_versions)
def tests(session):
    """Run the test suite with coverage."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        *[f"--cov={package}" for package in PACKAGES],
        "--cov-report=term-missing",
        "--cov-report=xml:coverage.xml",
        "--cov-fail-under=80",
        "-v",
        *session.posargs,
    )


@nox.session(python=python_versions[0])
def lint(session):
    """Run ruff for linting and formatting."""
    session.install("ruff>=0.1.0")
    session.run("ruff", "check", *PACKAGES, "tests")
    session.run("ruff", "format", "--check", *PACKAGES, "tests")


@nox.session(python=python_versions[0])
def format_code(session):
    """Format code with ruff."""
    session.install("ruff>=0.1.0")
    session.run("ruff", "format", *PACKAGES, "tests")
    session.run("ruff", "check", "--fix", *PACKAGES, "tests")


@nox.session(python=python_versions[0])
def reliability(session):
    """Run only the request retry and rate limiting tests."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "-v",
        "tests/infrastructure",
        "tests/test_ratelimit.py",
        *session.posargs,
    )


@nox.session(python=python_versions[0])
def harvest(session):
    """Run a harvest; needs STARTGG_API_KEY in the environment."""
    session.install("-e", ".")
    session.run("python", "-m", "upset_finder", *session.posargs)
