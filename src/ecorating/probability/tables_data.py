"""
Default empirical win-probability data.

State win rates are T-side round win rates keyed "{t_alive}v{ct_alive}_{bomb}",
aggregated from a large sample of competitive rounds. Duel rates are attacker
win rates keyed "{attacker_tier}_vs_{defender_tier}". Map rates are T-side
round win rates per map.
"""

DEFAULT_STATE_WIN_RATES: dict[str, float] = {
    "5v5_none": 0.494,
    "5v4_none": 0.712,
    "5v3_none": 0.890,
    "5v2_none": 0.979,
    "5v1_none": 0.999,
    "5v0_none": 0.602,
    "4v5_none": 0.302,
    "4v4_none": 0.510,
    "4v3_none": 0.745,
    "4v2_none": 0.923,
    "4v1_none": 0.994,
    "4v0_none": 0.599,
    "3v5_none": 0.137,
    "3v4_none": 0.289,
    "3v3_none": 0.514,
    "3v2_none": 0.780,
    "3v1_none": 0.961,
    "3v0_none": 0.591,
    "2v5_none": 0.031,
    "2v4_none": 0.098,
    "2v3_none": 0.236,
    "2v2_none": 0.491,
    "2v1_none": 0.823,
    "2v0_none": 0.686,
    "1v5_none": 0.004,
    "1v4_none": 0.012,
    "1v3_none": 0.047,
    "1v2_none": 0.148,
    "1v1_none": 0.435,
    "1v0_none": 0.605,
    "0v5_none": 0.000,
    "0v4_none": 0.500,
    "0v3_none": 0.500,
    "0v2_none": 0.000,
    "0v1_none": 0.000,
    "0v0_none": 0.000,
    "5v5_planted": 0.806,
    "5v4_planted": 0.855,
    "5v3_planted": 0.942,
    "5v2_planted": 0.988,
    "5v1_planted": 0.994,
    "5v0_planted": 1.000,
    "4v5_planted": 0.530,
    "4v4_planted": 0.675,
    "4v3_planted": 0.835,
    "4v2_planted": 0.957,
    "4v1_planted": 0.976,
    "4v0_planted": 1.000,
    "3v5_planted": 0.249,
    "3v4_planted": 0.403,
    "3v3_planted": 0.643,
    "3v2_planted": 0.857,
    "3v1_planted": 0.970,
    "3v0_planted": 1.000,
    "2v5_planted": 0.076,
    "2v4_planted": 0.143,
    "2v3_planted": 0.344,
    "2v2_planted": 0.629,
    "2v1_planted": 0.898,
    "2v0_planted": 0.600,
    "1v5_planted": 0.019,
    "1v4_planted": 0.031,
    "1v3_planted": 0.087,
    "1v2_planted": 0.269,
    "1v1_planted": 0.604,
    "1v0_planted": 0.750,
    "0v5_planted": 0.000,
    "0v4_planted": 0.000,
    "0v3_planted": 0.000,
    "0v2_planted": 0.001,
    "0v1_planted": 0.004,
    "0v0_planted": 1.000,
}

DEFAULT_DUEL_WIN_RATES: dict[str, float] = {
    "starter_pistol_vs_starter_pistol": 0.500,
    "starter_pistol_vs_upgraded_pistol": 0.527,
    "starter_pistol_vs_smg": 0.264,
    "starter_pistol_vs_rifle": 0.252,
    "starter_pistol_vs_awp": 0.268,
    "upgraded_pistol_vs_starter_pistol": 0.473,
    "upgraded_pistol_vs_upgraded_pistol": 0.500,
    "upgraded_pistol_vs_smg": 0.334,
    "upgraded_pistol_vs_rifle": 0.360,
    "upgraded_pistol_vs_awp": 0.346,
    "smg_vs_starter_pistol": 0.736,
    "smg_vs_upgraded_pistol": 0.666,
    "smg_vs_smg": 0.500,
    "smg_vs_rifle": 0.426,
    "smg_vs_awp": 0.402,
    "rifle_vs_starter_pistol": 0.748,
    "rifle_vs_upgraded_pistol": 0.640,
    "rifle_vs_smg": 0.574,
    "rifle_vs_rifle": 0.500,
    "rifle_vs_awp": 0.467,
    "awp_vs_starter_pistol": 0.732,
    "awp_vs_upgraded_pistol": 0.653,
    "awp_vs_smg": 0.598,
    "awp_vs_rifle": 0.533,
    "awp_vs_awp": 0.500,
}

DEFAULT_MAP_T_WIN_RATES: dict[str, float] = {
    "de_ancient": 0.507,
    "de_anubis": 0.551,  # T-sided
    "de_dust2": 0.507,
    "de_inferno": 0.514,
    "de_mirage": 0.500,
    "de_nuke": 0.475,  # CT-sided
    "de_overpass": 0.488,
    "de_train": 0.448,  # CT-sided
    "de_vertigo": 0.480,
}
