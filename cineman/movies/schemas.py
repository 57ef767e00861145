from typing import Dict, List, Optional
from datetime import date
from enum import Enum
import uuid

from cineman.models import Genre, Format, Language, TimeSlot
from cineman.responses import CamelModel

class SortBy(str, Enum):
    TITLE = "TITLE"
    RATING = "RATING"
    RELEASE_DATE = "RELEASE_DATE"
    DURATION = "DURATION"

class SortOrder(str, Enum):
    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"

class Sort(CamelModel):
    sort_by: SortBy = SortBy.TITLE
    sort_order: SortOrder = SortOrder.ASCENDING

class QueryMovieRequest(CamelModel):
    title: Optional[str] = None
    genre: Optional[Genre] = None
    language: Optional[Language] = None
    format: Optional[Format] = None
    sort: Optional[Sort] = None

class MovieDto(CamelModel):
    movie_id: uuid.UUID
    title: str
    description: str
    rating: str
    poster: Optional[str] = None

    @classmethod
    def from_movie(cls, movie) -> "MovieDto":
        return cls(
            movie_id=movie.id,
            title=movie.name,
            description=movie.description,
            rating=movie.rating,
            poster=movie.poster_url
        )

class ShowTimeDto(CamelModel):
    id: uuid.UUID
    movie_id: uuid.UUID
    show_date: date
    theatre_name: str
    seats_per_time_slot: Dict[TimeSlot, int]
    price_per_seat: int

class GetMovieResponse(CamelModel):
    movie: MovieDto
    show_times: List[ShowTimeDto]

class QueryMovieResponse(CamelModel):
    total_records_found: int
    movies: List[MovieDto]

class QueryParametersResponse(CamelModel):
    genres: List[Genre]
    formats: List[Format]
    languages: List[Language]
    sort_by: List[SortBy]
