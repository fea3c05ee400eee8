"""Configuration management for threadedtest."""

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from threadedtest.core.builtin import INTERNAL_NAMESPACE


CONFIG_NAMES = ["threadedtest.json", ".threadedtest.json"]


class ProjectConfig(BaseModel):
    """Project identification and metadata."""

    name: str = Field(default="my-project", description="Project name for identification")
    description: str = Field(default="", description="Brief description of the project")


class RunConfig(BaseModel):
    """Test discovery and execution configuration."""

    modules: list[str] = Field(default_factory=list, description="Dotted names of modules to discover tests in")
    tests: list[str] = Field(
        default_factory=list,
        description="Selection patterns: exact test names or package prefixes (empty runs all non-hidden tests)",
    )
    test_prefix: str = Field(default="test", description="Name prefix of test functions")
    single_threaded: bool = Field(default=False, description="Run every test in one thread")
    threads: Optional[int] = Field(default=None, description="Worker threads (default: executor's choice)")
    builtin_tests: bool = Field(default=True, description="Collect doctests of loaded modules")
    internal_namespace: str = Field(
        default=INTERNAL_NAMESPACE,
        description="Package whose doctests run at startup instead of as test cases",
    )
    python_path: list[str] = Field(default_factory=lambda: ["."], description="Directories to add to sys.path")

    @field_validator("threads")
    @classmethod
    def validate_threads(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("Thread count must be at least 1")
        return v

    @field_validator("test_prefix")
    @classmethod
    def validate_test_prefix(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Test prefix cannot be empty")
        return v


class ThreadedTestConfig(BaseModel):
    """Main configuration for threadedtest."""

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    run: RunConfig = Field(default_factory=RunConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "ThreadedTestConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def find_and_load(cls, start_dir: Path | str | None = None) -> "ThreadedTestConfig":
        """Find and load configuration file, searching up the directory tree."""
        if start_dir is None:
            start_dir = Path.cwd()
        else:
            start_dir = Path(start_dir)

        current = start_dir.resolve()
        for directory in [current, *current.parents]:
            for name in CONFIG_NAMES:
                config_path = directory / name
                if config_path.exists():
                    return cls.from_file(config_path)

        raise FileNotFoundError(
            "No configuration file found. Create threadedtest.json or run 'threadedtest init'"
        )

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)

    def get_python_path(self, base_dir: Path | str | None = None) -> list[Path]:
        """Get absolute paths for the configured python path entries."""
        if base_dir is None:
            base_dir = Path.cwd()
        else:
            base_dir = Path(base_dir)

        return [(base_dir / entry).resolve() for entry in self.run.python_path]


def get_default_config() -> ThreadedTestConfig:
    """Return a default configuration."""
    return ThreadedTestConfig(
        project=ProjectConfig(name="my-project"),
        run=RunConfig(modules=["tests"]),
    )


def create_example_config(output_path: Path | str) -> Path:
    """Create an example configuration file."""
    output_path = Path(output_path)
    config = get_default_config()
    config.project.description = "Brief description of your project"
    config.to_file(output_path)
    return output_path
