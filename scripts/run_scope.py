"""CLI for the complyscope service."""

import asyncio
import sys
import argparse

import httpx
import yaml


async def plan(base_url: str, framework_id: str) -> dict:
    """Build and persist the workspace scope."""
    async with httpx.AsyncClient(timeout=120.0) as client:
        response = await client.post(
            f"{base_url}/plan",
            json={"framework_id": framework_id},
        )
        response.raise_for_status()
        return response.json()


async def show_scope(base_url: str) -> dict:
    """Get the workspace scope descriptor."""
    async with httpx.AsyncClient(timeout=30.0) as client:
        response = await client.get(f"{base_url}/scope")
        response.raise_for_status()
        return response.json()


async def generate(base_url: str) -> dict:
    """Narrow the workspace plan template to the scope."""
    async with httpx.AsyncClient(timeout=60.0) as client:
        response = await client.post(f"{base_url}/generate")
        response.raise_for_status()
        return response.json()


async def main_async(args):
    """Main async function."""
    base_url = f"http://{args.host}:{args.port}/api/v1"

    if args.command == "plan":
        scope = await plan(base_url, args.framework_id)
        print(f"Scope for {scope['frameworkId']}: {len(scope['includeControls'])} controls")
        print("Edit the workspace scope file to adjust it before running generate.")
    elif args.command == "show":
        scope = await show_scope(base_url)
        print(yaml.safe_dump(scope, sort_keys=False), end="")
    else:
        summary = await generate(base_url)
        print(f"Controls in scope: {summary['controls_in_scope']}")
        for item in summary["skipped"]:
            if item["step"]:
                print(f"  skipped step: {item['activity']} / {item['step']}")
            else:
                print(f"  skipped activity: {item['activity']}")
        print(f"Scoped plan written to: {summary['scoped_plan']}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="complyscope CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Build the scope for a framework
  python run_scope.py plan anssi_bp28_minimal

  # Review the scope, then narrow the plan template
  python run_scope.py show
  python run_scope.py generate
        """,
    )

    parser.add_argument(
        "--host",
        default="localhost",
        help="Server host (default: localhost)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Server port (default: 8000)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    plan_parser = subparsers.add_parser("plan", help="Build the workspace scope")
    plan_parser.add_argument("framework_id", help="Framework identifier")
    subparsers.add_parser("show", help="Print the workspace scope")
    subparsers.add_parser("generate", help="Narrow the plan template to the scope")

    args = parser.parse_args()

    try:
        asyncio.run(main_async(args))
    except httpx.ConnectError:
        print(f"\nError: Could not connect to server at {args.host}:{args.port}")
        print("Make sure the server is running: uvicorn complyscope.main:app")
        sys.exit(1)
    except httpx.HTTPStatusError as e:
        try:
            detail = e.response.json().get("detail")
        except ValueError:
            detail = e.response.text
        print(f"\nError: {e.response.status_code} {detail}")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
