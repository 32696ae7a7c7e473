"""Internal constants shared across the bot."""

from __future__ import annotations

import re

TELEGRAM_API_URL = "https://api.telegram.org"

# ------------------------------------------------------------------
# Input patterns
# ------------------------------------------------------------------

OPENMOVE_CODE_RE = re.compile(r"TT[0-9]{3,4}")
BUS_NUMBER_RE = re.compile(r"[0-9]{3,4}")
ROPEWAY_RE = re.compile(r"funivia (?:trento|sardagna)", re.IGNORECASE)

TRAIN_STATIONS: tuple[str, ...] = (
    "ora",
    "primolano",
    "ala",
    "avio",
    "borghetto",
    "borgo est",
    "borgo",
    "calceranica",
    "caldonazzo",
    "grigno",
    "lavis",
    "levico",
    "mezzocorona borgata",
    "mori",
    "pergine",
    "povo",
    "rovereto",
    "cristoforo",
    "serravalle",
    "scrigno",
    "trento nord",
    "trento bartolameo",
    "trento chiara",
    "villazzano",
    "trento",
    "gardolo",
    "zona industriale",
    "lamar",
    "zambana",
    "nave",
    "grumo",
    "mezzocorona",
    "mezzolombardo",
    "masi",
    "crescino",
    "denno",
    "mollaro",
    "segno",
    "taio",
    "dermulo",
    "tassullo",
    "cles polo",
    "cles",
    "mostizzolo",
    "bozzana",
    "tozzaga",
    "cassana",
    "cavizzana",
    "caldes",
    "terzolas",
    "malè",
    "croviana",
    "monclassico",
    "dimaro",
    "mastellina",
    "daolasa",
    "piano",
    "marileva",
    "mezzana",
)
TRAIN_STATION_RE = re.compile("|".join(re.escape(name) for name in TRAIN_STATIONS), re.IGNORECASE)

# ------------------------------------------------------------------
# Reply texts
# ------------------------------------------------------------------

HELP_TEXT = (
    "Questo bot ti fornisce i codici dei mezzi pubblici in Trentino utilizzabili con gli abbonamenti OpenMove.\n"
    "Come funziona: \n"
    "(i) BUS: mandami un messaggio contenente il numero del bus (puoi leggerlo, ad esempio, sul paraurti "
    "anteriore, sulla fiancata o sul retro del mezzo), il bot ti restituirà il codice.\n"
    "(ii)Treno: mandami un messaggio con il nome della stazione\n"
    "(iii)Funivia Trento-Sardagna: invia 'funivia trento' per il codice della stazione a valle, "
    "'funivia sardagna' per il codice della stazione a monte.\n\n"
    "Aiutaci ad ampliare la collezione di codici! Segnala codici non presenti o errati utilizzando il comando /feed\n"
    "Disclaimer: questo bot è stato creato da uno sviluppatore terzo, e non è in nessun modo dipendente da "
    "OpenMove, Trentino Trasporti o altri fornitori del servizio di trasporto pubblico. Lo sviluppatore non si "
    "assume nessuna responsabilità sulla correttezza dei dati inseriti dagli utenti."
)
START_TEXT = "Ciao!\n" + HELP_TEXT
NO_BOTS_TEXT = "No bot allowed!"
FEED_PROMPT_TEXT = "Vuoi inserire un codice? Dimmi il numero del bus o il nome della stazione"
TRAIN_CODE_PROMPT_TEXT = "OK. Dimmi il codice openmove della stazione di {name}"
BUS_CODE_PROMPT_TEXT = "OK. Dimmi il codice openmove del bus {name}"
ABANDON_TEXT = "Fa lo stesso :D"
NOT_UNDERSTOOD_TEXT = (
    "Non capisco :(\n"
    "Se stai cercando una stazione, prova ad usare meno parole. Ad esempio, usa 'Borgo' per Borgo Valsugana "
    "Centro, 'borgo est' per Borgo Valsugana Est"
)
UNKNOWN_CODE_TEXT = "Non conosco il codice di questo mezzo. Ehi, potresti dirmelo tu!"
QUERY_ERROR_TEXT = "Errore interno."
CONTRIBUTION_TEXT = "Grazie! Il tuo contributo è stato registrato"
ACKNOWLEDGED_TEXT = "Grazie"
INVALID_CODE_TEXT = "Codice non valido!"
SUBMIT_ERROR_TEXT = "Errore interno :("
