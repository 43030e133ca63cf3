"""
Social Copy for Spotlight Themes

This module contains the headers, intros, hashtags, and footers used in the
social media text for each spotlight theme.
Kept apart from settings.py to separate editorial copy from configuration.
"""

# Shared lines
PROMO_LINE = "\U0001F310 Every film, every cinema, one place. Find showtimes at Clusterflick.com"
MORE_MARKER = "+more at clusterflick.com"

# Last chance: films whose final performance is this week
LAST_CHANCE_COPY = {
    "header": "LAST CHANCE THIS WEEK!",
    "intro": "These {{count}} films are leaving London cinemas soon - catch them before they're gone!",
    "hashtags": "#LastChance #LondonCinema #IndieFilm #Clusterflick",
    "footer": "\U0001F4A1 Pro tip: The best seat is the one you're actually sitting in. Go see something!",
}

# New films: films first seen this week
NEW_FILMS_COPY = {
    "header": "NEW FILMS THIS WEEK!",
    "intro": "These {{count}} films just landed this week in London cinemas - check them out!",
    "hashtags": "#NewFilms #LondonCinema #IndieFilm #Clusterflick",
    "footer": "\U0001F37F Fresh popcorn, fresh films. What are you waiting for?",
}

# Single movie spotlight
SINGLE_MOVIE_COPY = {
    "header": "MOVIE SPOTLIGHT!",
    "hashtags": "#NowShowing #LondonCinema #IndieFilm #Clusterflick",
    "footer": "✨ Discover something special at the cinema!",
}

# Two-film program spotlight
PROGRAM_COPY = {
    "header": "DOUBLE FEATURE SPOTLIGHT!",
    "hashtags": "#DoubleFeature #LondonCinema #IndieFilm #Clusterflick",
    "footer": "✨ Discover something special at the cinema!",
}
