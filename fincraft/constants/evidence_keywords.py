# Keyword groups used to attach grounding citations to asset categories.
# A category belongs to a group when its name contains the keyword or one of the
# aliases; a citation supports it when its title contains one of the terms.
EVIDENCE_KEYWORDS = {
    "equity": {
        "aliases": ("equities", "stock"),
        "terms": ("stock", "equity", "equities", "share"),
    },
    "bond": {
        "aliases": ("fixed income",),
        "terms": ("bond", "fixed income", "treasury"),
    },
    "real estate": {
        "aliases": ("reit", "property"),
        "terms": ("real estate", "property", "reit"),
    },
    "cash": {
        "aliases": ("money market", "short-term"),
        "terms": ("money market", "savings", "treasury"),
    },
    "commodity": {
        "aliases": ("commodities",),
        "terms": ("commodity", "commodities", "gold", "oil"),
    },
    "alternative": {
        "aliases": (),
        "terms": ("alternative", "hedge", "private"),
    },
}

# Confidence thresholds shared by the attributor and the presentation helpers.
HIGH_CONFIDENCE = 0.85
MEDIUM_CONFIDENCE = 0.70
