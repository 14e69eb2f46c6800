#!/usr/bin/env python3
"""Run reviewer assignment for one PR locally.

Usage: scripts/run_assignment.py owner/repo 123
"""
import sys
from dotenv import load_dotenv

load_dotenv()

from src.services.reviewers.service import assign_pull_request_reviewers


def main():
    if len(sys.argv) != 3 or "/" not in sys.argv[1]:
        print(__doc__)
        sys.exit(1)

    owner, repo = sys.argv[1].split("/", 1)
    result = assign_pull_request_reviewers(owner=owner, repo=repo, pr_number=int(sys.argv[2]))
    print(f"Assignment result: {result.model_dump()}")


if __name__ == "__main__":
    main()
