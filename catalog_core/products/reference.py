"""Product reference derivation"""

from typing import Optional


def derive_reference(style: Optional[str], model: Optional[str], code: str) -> str:
    """
    Build the canonical vendor reference of a product.

    Args:
        style: Vendor style label
        model: Vendor model label
        code: Product identity code

    Returns:
        "{style}-{model}" when either label is present, else "reference-{code}"
    """
    if style or model:
        return f"{style or ''}-{model or ''}"

    return f"reference-{code}"
