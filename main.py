#!/usr/bin/env python3
"""
Ontology Explorer - Console Entry Point

Browse an ontology server from the terminal: type a term to search, select a
result to see its detail, contexts and relations, and open any related term to
search for it in turn.
"""

import asyncio
import argparse
import sys

from ontoexplorer.api.client import OntologyAPIClient
from ontoexplorer.config import settings
from ontoexplorer.errors import ExplorerError
from ontoexplorer.session import ExplorerSession
from ontoexplorer.surface import ConsoleSurface
from ontoexplorer.types import ElementType
from ontoexplorer.utils.logger import app_logger, setup_logging

HELP = """Commands:
  <text>              search for <text>
  :select N           show result number N
  :open TERM          search for a related term
  :node ID            open a graph node by id
  :next / :prev       page through results
  :type T             filter by element type (Concept, Relation, Instance, or 'any')
  :ontology ID        filter by ontology ('any' to clear)
  :ontologies         list loaded ontologies
  :upload ONT META [CTX]  upload an ontology
  :quit               leave"""


async def handle_command(session: ExplorerSession, line: str) -> bool:
    """Run one console line. Returns False when the user wants to leave."""
    command, _, argument = line.partition(" ")
    argument = argument.strip()

    if command in (":quit", ":q"):
        return False
    if command == ":help":
        print(HELP)
    elif command == ":select":
        session.results.select_index(int(argument))
    elif command == ":open":
        session.activate_term(argument)
    elif command == ":node":
        session.click_node(argument)
    elif command == ":next":
        session.queries.next_page()
    elif command == ":prev":
        session.queries.previous_page()
    elif command == ":type":
        element_type = None if argument in ("", "any") else ElementType(argument)
        session.set_filters(session.ontology_filter, element_type)
    elif command == ":ontology":
        session.set_filters(None if argument in ("", "any") else argument, session.type_filter)
    elif command == ":ontologies":
        await session.catalog.refresh()
    elif command == ":upload":
        files = argument.split()
        if len(files) < 2:
            print("usage: :upload ONTOLOGY_FILE METADATA_FILE [CONTEXT_FILE]")
        else:
            response = await session.catalog.upload(*files[:3])
            print(response.get("message", "Ontology loaded."))
    elif command.startswith(":"):
        print(f"Unknown command {command}, try :help")
    else:
        session.perform_search(line)

    await session.settle()
    return True


async def run_console(api_url: str, debounce_seconds: float):
    loop = asyncio.get_running_loop()
    async with OntologyAPIClient(base_url=api_url) as api:
        session = ExplorerSession(api, ConsoleSurface(), debounce_seconds=debounce_seconds)
        await session.start()
        print(HELP)

        while True:
            line = await loop.run_in_executor(None, lambda: input("ontology> "))
            line = line.strip()
            if not line:
                continue
            try:
                if not await handle_command(session, line):
                    break
            except (ExplorerError, ValueError) as e:
                print(f"! {e}")
            session.dismiss_error()


def main():
    """Main entry point for the console explorer."""
    parser = argparse.ArgumentParser(description="Ontology Explorer - console front-end")
    parser.add_argument("--api-url", default=settings.api_base_url, help="Base URL of the ontology API")
    parser.add_argument("--debounce-ms", type=int, default=settings.debounce_ms, help="Quiet interval before a typed query is sent")
    parser.add_argument("--log-level", default=settings.log_level, help="Log level")

    args = parser.parse_args()

    setup_logging(args.log_level, settings.log_file)
    app_logger.info(f"Starting Ontology Explorer against {args.api_url}")

    try:
        asyncio.run(run_console(args.api_url, args.debounce_ms / 1000.0))
    except (KeyboardInterrupt, EOFError):
        app_logger.info("Shutting down...")
    except Exception as e:
        app_logger.error(f"Error running explorer: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
