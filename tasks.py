# type: ignore
from invoke import task


@task
def venv(ctx):
    """Create the development environment with uv, including dev extras."""
    ctx.run("uv sync --extra dev")


@task
def clean(ctx):
    """
    Remove untracked files and directories after confirmation.
    Use caution as this operation cannot be undone.
    """
    ctx.run("git clean -nfdx")

    response = (
        input("Are you sure you want to remove all untracked files? (y/n) [n]: ")
        .strip()
        .lower()
    )
    if response == "y":
        ctx.run("git clean -fdx")


@task
def lint(ctx):
    """Check style, formatting and types."""
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """Run tests with coverage information."""
    ctx.run("pytest --cov=adamctl --cov-report=term-missing", pty=True)


@task
def mock(ctx, port=1025):
    """Run a local mock output module for manual testing."""
    ctx.run(f"adamctl mock --host 127.0.0.1 --port {port}", pty=True)


@task
def build_package(ctx):
    """Build sdist and wheel with uv."""
    ctx.run("rm -rf dist")
    ctx.run("uv build")
