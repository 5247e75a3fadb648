"""
Random "Movie of the Day" pick.
"""

import random

from errors import NoEligibleEntries


def generate_movie_of_the_day(movie_list, rng=random):
    """
    Pick one title uniformly at random.

    Each call is independent; the previous pick may repeat.

    Args:
        movie_list: MovieList to draw from, or None
        rng: Source of randomness with a `randrange` method

    Returns:
        The picked title
    """
    if movie_list is None or not movie_list.movies:
        raise NoEligibleEntries()
    index = rng.randrange(len(movie_list.movies))
    return movie_list.movies[index].title
