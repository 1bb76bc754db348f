import argparse
import json
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from matchfinder.services.pipeline import MatchInputs, compute_matches
from matchfinder.services.seeding import generate_pool, pool_summary


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic matrimonial profile pool")
    parser.add_argument("--n-profiles", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--out", type=str, default="")
    parser.add_argument("--viewer", type=str, default="", help="profileId to run a default match search for")
    parser.add_argument("--sort", type=str, default="newest")
    args = parser.parse_args()

    pool = generate_pool(n_profiles=args.n_profiles, seed=args.seed)

    if args.out:
        payload = [p.model_dump(by_alias=True, exclude_none=True) for p in pool]
        Path(args.out).write_text(json.dumps(payload, indent=2), encoding="utf-8")

    print("Pool generated")
    for k, v in pool_summary(pool).items():
        print(f"- {k}: {v}")

    if args.viewer:
        result = compute_matches(MatchInputs(viewer_profile_id=args.viewer, profiles=pool, sort=args.sort))
        print(f"Matches for {args.viewer}: {result.total} ({result.total_pages} pages)")
        for p in result.profiles:
            print(f"- {p.profile_id} {p.display_name} age={p.age} {p.religion or ''} {p.location}")
        if result.diagnostics is not None:
            print(f"No matches: {result.diagnostics.reason}")
            for issue in result.diagnostics.issues:
                print(f"- {issue.filter_key}: {issue.match_count} ({issue.suggestion})")


if __name__ == "__main__":
    main()
