__all__ = [
    "cat_strs",
]


cat_strs = "".join
