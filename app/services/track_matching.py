"""
Nombres de circuito: el simulador usa su propio identificador (Austria, Spa,
Texas...) y el calendario de la liga suele usar el nombre completo o el país.
"""

# Variantes habituales de cada nombre que reporta el simulador
TRACK_NAME_VARIATIONS = {
    "Sakhir (Bahrain)": ["Bahrain", "Sakhir"],
    "Paul Ricard": ["Paul Ricard", "Le Castellet"],
    "Catalunya": ["Barcelona", "Catalunya", "Montmelo"],
    "Silverstone": ["Silverstone", "Great Britain"],
    "Monza": ["Monza", "Italy"],
    "Spa": ["Spa", "Spa-Francorchamps", "Belgium"],
    "Suzuka": ["Suzuka", "Japan"],
    "Abu Dhabi": ["Abu Dhabi", "Yas Marina"],
    "Texas": ["Austin", "Texas", "COTA"],
    "Brazil": ["Interlagos", "Brazil", "São Paulo"],
    "Austria": ["Red Bull Ring", "Austria", "Spielberg"],
    "Mexico": ["Mexico City", "Mexico", "Hermanos Rodriguez"],
    "Baku (Azerbaijan)": ["Baku", "Azerbaijan"],
    "Zandvoort": ["Zandvoort", "Netherlands", "Holland"],
    "Imola": ["Imola", "San Marino"],
    "Portimão": ["Portimão", "Portugal", "Algarve"],
    "Jeddah": ["Jeddah", "Saudi Arabia"],
    "Miami": ["Miami", "Miami Gardens"],
    "Las Vegas": ["Las Vegas", "Nevada"],
    "Losail": ["Losail", "Qatar"],
}

# Identificador del simulador -> nombre oficial del circuito
TRACK_ID_TO_NAME = {
    "Austria": "Red Bull Ring",
    "Bahrain": "Bahrain International Circuit",
    "Sakhir": "Sakhir (Bahrain)",
    "Monaco": "Circuit de Monaco",
    "Silverstone": "Silverstone Circuit",
    "Monza": "Autodromo Nazionale di Monza",
    "Spa": "Circuit de Spa-Francorchamps",
    "Suzuka": "Suzuka International Racing Course",
    "Abu_Dhabi": "Yas Marina Circuit",
    "Abu Dhabi": "Yas Marina Circuit",
    "Texas": "Circuit of the Americas",
    "Brazil": "Autódromo José Carlos Pace",
    "Mexico": "Autódromo Hermanos Rodríguez",
    "Baku": "Baku City Circuit",
    "Zandvoort": "Circuit Zandvoort",
    "Imola": "Autodromo Enzo e Dino Ferrari",
    "Portimão": "Autódromo Internacional do Algarve",
    "Jeddah": "Jeddah Corniche Circuit",
    "Miami": "Miami International Autodrome",
    "Las_Vegas": "Las Vegas Strip Circuit",
    "Las Vegas": "Las Vegas Strip Circuit",
    "Losail": "Lusail International Circuit",
    "Catalunya": "Circuit de Barcelona-Catalunya",
    "Montreal": "Circuit Gilles Villeneuve",
    "Hungaroring": "Hungaroring",
    "Singapore": "Marina Bay Street Circuit",
    "Hockenheim": "Hockenheimring",
    "Paul_Ricard": "Circuit Paul Ricard",
    "Paul Ricard": "Circuit Paul Ricard",
    "Shanghai": "Shanghai International Circuit",
}


def map_track_id_to_name(track_id: str) -> str:
    """Nombre oficial del circuito, o el identificador tal cual si no lo conocemos."""
    if not track_id:
        return "Unknown Track"
    if track_id in TRACK_ID_TO_NAME:
        return TRACK_ID_TO_NAME[track_id]

    lowered = track_id.lower()
    for key, value in TRACK_ID_TO_NAME.items():
        if key.lower() == lowered:
            return value
    return track_id


def track_name_synonyms(track_name: str) -> list[str]:
    """
    Nombres alternativos para buscar el evento cuando falla la coincidencia
    exacta. No incluye el nombre original y no repite entradas.
    """
    candidates: list[str] = []

    def add(name: str):
        if name and name != track_name and name not in candidates:
            candidates.append(name)

    for variation in TRACK_NAME_VARIATIONS.get(track_name, []):
        add(variation)

    add(map_track_id_to_name(track_name))

    # Búsqueda inversa: el calendario guarda el nombre oficial o una variante
    for sim_name, variations in TRACK_NAME_VARIATIONS.items():
        if track_name in variations:
            add(sim_name)
            for variation in variations:
                add(variation)

    for sim_id, official in TRACK_ID_TO_NAME.items():
        if official == track_name:
            add(sim_id)

    return candidates
