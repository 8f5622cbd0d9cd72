"""
Console summary of the rankings held in a fact store.
"""

from .config import ENTITY_KINDS, SUMMARY_TOP
from .store import FactStore


def _print_ranking(title: str, df, name_col: str, count_col: str, top: int):
    print(f"\n{title}:")
    if df.empty:
        print("  (none)")
        return
    for _, row in df.head(top).iterrows():
        print(f"  {row[count_col]:>5}  {row[name_col]}")


def print_summary(store: FactStore, top: int = SUMMARY_TOP):
    """Print the top entries of every ranking view"""
    print("\n" + "="*60)
    print("RANKINGS")
    print("="*60)

    for kind in ENTITY_KINDS:
        _print_ranking(
            f"Bug-prone {kind}s", store.bug_prone(kind), kind, f'{kind}_count', top
        )
        _print_ranking(
            f"Frequently changed {kind}s", store.frequently_changed(kind), kind, f'{kind}_count', top
        )

        co_changed = store.co_changed(kind)
        print(f"\nMost co-changed {kind} pairs (top {top} by count):")
        if co_changed.empty:
            print("  (none)")
            continue
        top_pairs = co_changed.sort_values(
            f'co_changed_{kind}_count', ascending=False, kind='stable'
        ).head(top)
        for _, row in top_pairs.iterrows():
            print(f"  {row[f'co_changed_{kind}_count']:>5}  "
                  f"{row[f'changed_{kind}']} <-> {row[f'co_changed_{kind}']}")
