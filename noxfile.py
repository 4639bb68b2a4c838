import nox

nox.options.default_venv_backend = "uv"
nox.options.sessions = ["tests"]

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]


def install(session: nox.Session) -> None:
    session.run_install(
        "uv",
        "sync",
        "--group",
        "dev",
        env={"UV_PROJECT_ENVIRONMENT": session.virtualenv.location},
    )


@nox.session(python=PYTHON_VERSIONS, tags=["tests"])
def tests(session: nox.Session) -> None:
    install(session)
    session.run("coverage", "run", "-m", "pytest", *session.posargs)
    session.run("coverage", "report", "--show-missing")


@nox.session(python=PYTHON_VERSIONS[-1])
def unit(session: nox.Session) -> None:
    """Run without the tests that listen on 127.0.0.1, for sandboxed runners."""
    install(session)
    session.run("pytest", "-m", "not loopback", *session.posargs)
