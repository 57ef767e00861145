import uuid

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from cineman.database import get_db
from cineman.auth.dependencies import get_current_user_id
from cineman.movies.schemas import (
    QueryMovieRequest, QueryMovieResponse, GetMovieResponse, MovieDto, ShowTimeDto
)
from cineman.movies.service import MovieService
from cineman.responses import success_response, failure_response

router = APIRouter(dependencies=[Depends(get_current_user_id)])

@router.get("/query")
def get_query_parameters(request: Request):
    """Get the values movies can be filtered and sorted by"""
    result = MovieService.get_query_parameters()
    if result.is_failure:
        return failure_response(request, result.error)
    return success_response(request, result.value)

@router.post("/query")
def search_movies(
    body: QueryMovieRequest,
    request: Request,
    page_number: int = Query(1, ge=1, alias="pageNumber", description="Page to return"),
    result_per_page: int = Query(20, ge=1, le=100, alias="resultPerPage", description="Movies per page"),
    db: Session = Depends(get_db)
):
    """Search movies with filters and sorting"""
    result = MovieService.query_movies(db, body, page_number=page_number, result_per_page=result_per_page)
    if result.is_failure:
        return failure_response(request, result.error)

    total, movies = result.value
    return success_response(request, QueryMovieResponse(
        total_records_found=total,
        movies=[MovieDto.from_movie(m) for m in movies]
    ))

@router.get("/{movie_id}")
def get_movie(
    movie_id: uuid.UUID,
    request: Request,
    db: Session = Depends(get_db)
):
    """Get a movie and its show times"""
    result = MovieService.get_movie(db, movie_id)
    if result.is_failure:
        return failure_response(request, result.error)

    movie, show_times = result.value
    return success_response(request, GetMovieResponse(
        movie=MovieDto.from_movie(movie),
        show_times=[ShowTimeDto.model_validate(s) for s in show_times]
    ))
