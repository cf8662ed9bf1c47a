from typing import Dict, Iterable, List, Set


def exclude_keys(data: Dict, keys: Set[str]) -> Dict:
    return {k: v for k, v in data.items() if k not in keys}


def exclude_keys_from_all(items: Iterable[Dict], keys: Set[str]) -> List[Dict]:
    """exclude_keys over a list response, order kept"""
    return [exclude_keys(item, keys) for item in items]
