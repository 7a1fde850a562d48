"""
Script to convert the ingredient CSV into the pre-generated JSON dataset.
The service reads the JSON first and only parses the CSV when it is missing.

Run with: python generate_ingredients.py [--csv PATH] [--out PATH]
"""

import argparse
import csv
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# Load environment variables
load_dotenv()

from services.ingredient_lookup import (
    DEFAULT_CSV_PATH,
    DEFAULT_JSON_PATH,
    read_csv_rows,
    resolve_dataset_path,
)


def convert_csv_to_json(csv_path: Path, json_path: Path) -> int:
    """
    Write every CSV row as a JSON object, keeping header names as keys.

    Returns:
        Number of rows written
    """
    rows = read_csv_rows(csv_path)

    json_path.parent.mkdir(parents=True, exist_ok=True)
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(rows, f, indent=2, ensure_ascii=False)

    return len(rows)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Convert ingredientsList.csv to JSON")
    parser.add_argument("--csv", default=os.getenv("INGREDIENTS_CSV_PATH", DEFAULT_CSV_PATH))
    parser.add_argument("--out", default=os.getenv("INGREDIENTS_JSON_PATH", DEFAULT_JSON_PATH))
    args = parser.parse_args(argv)

    csv_path = resolve_dataset_path(args.csv)
    json_path = resolve_dataset_path(args.out)

    try:
        print(f"📥 Reading CSV: {csv_path}")
        count = convert_csv_to_json(csv_path, json_path)
        print(f"✅ Wrote {count} rows to {json_path}")
        return 0

    except (OSError, csv.Error, ValueError) as e:
        print(f"❌ Conversion failed: {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
