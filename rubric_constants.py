# rubric_constants.py
"""Fixed tables for the Structural Logical Score rubric.

Index order is load-bearing: score vectors, coefficients and names are aligned
positionally.
"""

RUBRIC_SIZE = 14

# The 14 rubric checkpoints in scoring order.
ITEM_NAMES: tuple[str, ...] = (
    "オープニングイメージ",
    "セットアップ",
    "インサイティング・インシデント",
    "ターニングポイント1",
    "サブプロット",
    "お楽しみ要素",
    "ピンチポイント1",
    "ミッドポイント",
    "ピンチポイント2",
    "すべてを失う",
    "再起のきっかけ",
    "ターニングポイント2",
    "クライマックス",
    "結末",
)

# Per-item ESC weights used for W2.
ESC_COEFFICIENTS: tuple[float, ...] = (
    0.60,
    0.60,
    1.25,
    1.25,
    0.80,
    0.80,
    1.15,
    1.35,
    1.25,
    1.60,
    1.25,
    1.50,
    1.60,
    1.00,
)

# W2 normalisation constant. Kept as a literal, not derived from the table.
ESC_TOTAL = 16.0

# Raw scores are 0-10; reported sub-scores are 0-100.
SCORE_SCALE = 10
W1_WEIGHT = 0.7
W2_WEIGHT = 0.3

# Boundary marker vocabulary for episode-structured stories.
TAB_MARKER = "タブ"
SPINOFF_MARKER = "スピンオフ"
SPINOFF_LABEL = "SP"
GENERIC_PART_LABEL = "パート{index}"
EPISODE_RANGE_LABEL = "第{first}話〜第{last}話"


def rubric_metadata() -> dict[str, list]:
    """Return the name and coefficient tables for reporting collaborators."""
    return {
        "item_names": list(ITEM_NAMES),
        "esc_coefficients": list(ESC_COEFFICIENTS),
    }
