import logging
import uuid
from typing import List, Tuple

from sqlalchemy.orm import Session

from cineman.errors import ErrorCode, Result
from cineman.models import Movie, ShowTime, Genre, Format, Language
from cineman.movies.schemas import (
    QueryMovieRequest, QueryParametersResponse, SortBy, SortOrder
)

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    SortBy.TITLE: Movie.name,
    SortBy.RATING: Movie.rating,
    SortBy.RELEASE_DATE: Movie.release_date,
    SortBy.DURATION: Movie.running_time,
}

class MovieService:
    @staticmethod
    def get_movie(db: Session, movie_id: uuid.UUID) -> Result[Tuple[Movie, List[ShowTime]]]:
        """Get a movie with all of its show times"""
        logger.info(f"Getting movie by ID: {movie_id}")
        movie = db.get(Movie, movie_id)
        if movie is None:
            logger.error(f"Movie with ID {movie_id} not found")
            return Result.failure(ErrorCode.MOVIE_NOT_FOUND)

        show_times = db.query(ShowTime).filter(
            ShowTime.movie_id == movie.id
        ).order_by(ShowTime.show_date, ShowTime.theatre_name).all()

        return Result.success((movie, show_times))

    @staticmethod
    def query_movies(
        db: Session,
        search: QueryMovieRequest,
        page_number: int = 1,
        result_per_page: int = 20
    ) -> Result[Tuple[int, List[Movie]]]:
        """Filter, sort and paginate the catalog"""
        query = db.query(Movie)

        # Apply filters
        if search.language is not None:
            query = query.filter(Movie.language == search.language)

        if search.format is not None:
            query = query.filter(Movie.format == search.format)

        if search.genre is not None:
            query = query.filter(Movie.genre == search.genre)

        if search.title:
            query = query.filter(Movie.name.ilike(f"%{search.title}%"))

        # Sorting, by name unless asked otherwise
        if search.sort is None:
            query = query.order_by(Movie.name.asc())
        else:
            logger.info(f"Sorting movies by {search.sort.sort_by.value} in {search.sort.sort_order.value} order")
            column = SORT_COLUMNS[search.sort.sort_by]
            if search.sort.sort_order == SortOrder.DESCENDING:
                query = query.order_by(column.desc())
            else:
                query = query.order_by(column.asc())

        # Get total count
        total = query.count()

        # Get paginated results
        movies = query.offset((page_number - 1) * result_per_page).limit(result_per_page).all()

        logger.info(f"Retrieved {len(movies)} of {total} movies")
        return Result.success((total, movies))

    @staticmethod
    def get_query_parameters() -> Result[QueryParametersResponse]:
        """List every value the catalog can be filtered or sorted by"""
        return Result.success(QueryParametersResponse(
            genres=list(Genre),
            formats=list(Format),
            languages=list(Language),
            sort_by=list(SortBy)
        ))
