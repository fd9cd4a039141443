# MIT License
"""Fixed physical and methodology reference values.

Values that a methodology revision may change (persistence table, GWPs,
thresholds) live on :class:`corc.params.MethodologyParams` instead.
"""

# CO2/C molar mass ratio, converts tonnes C to tonnes CO2
CO2_TO_C_RATIO = 44.0 / 12.0

# mass-percent H/C_org to molar ratio
H_TO_C_MOLAR_FACTOR = 12.0

KG_PER_TONNE = 1000.0

MJ_PER_GJ = 1000.0

# iLUC emission factors, kg CO2e per MJ feedstock (dry LHV basis)
ILUC_FACTORS = {
    "CEREALS_STARCH": 0.012,
    "SUGAR_CROPS": 0.013,
    "OIL_CROPS": 0.055,
}

# biomass categories that need an iLUC assessment
HIGH_ILUC_RISK_CATEGORIES = ("A", "B", "N")

# waste and residue categories
LOW_RISK_WASTE_CATEGORIES = ("C", "D", "E", "F", "G", "H", "I", "J", "K", "L")

BIOMASS_CATEGORIES = {
    "A": "Straw, stover, husks, shells, cobs and similar agricultural residues",
    "B": "Garden and park waste (excluding food waste)",
    "C": "Forestry residues",
    "D": "Wood processing industry streams (sawdust, bark, chips)",
    "E": "Post-consumer wood",
    "F": "Food and beverage processing residues",
    "G": "Food processing fats and oils",
    "H": "Animal manure and slurry",
    "I": "Human waste",
    "J": "Sewage sludge",
    "K": "Paper industry sludge and black liquor",
    "L": "Other industrial and commercial organic streams",
    "M": "Invasive species and nuisance vegetation",
    "N": "Landscape management residues",
    "O": "Cultivated or harvested water-based plants or algae",
}
