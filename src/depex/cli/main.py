"""
depex CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import click

from .commands import explore


@click.group()
@click.version_option(package_name="depex")
def main():
    """depex: Incremental dependency-graph explorer.

    Materializes the dependency neighborhood of a package, version or
    requirement file by expanding it level by level against the Depex API.

    \b
    Quick Start:
      depex explore pkg:pypi/requests --name requests --depth 2
      depex explore pkg:npm/express --type NPMPackage --latest-only
      depex explore pkg:pypi/flask --fixture graph.json --json
    """
    pass


main.add_command(explore.explore)

if __name__ == "__main__":
    main()
