'''
API endpoints for classes, subjects, exams and results.
'''
from typing import Annotated, Any, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Response, status

from ..models import academics as academic_models
from ..models import users as user_models
from ..models.common import BulkResult
from ..services.class_service import ClassService
from ..services.exam_service import ExamService


class ClassesAPI:
    """
    A class to encapsulate endpoints for Classes and Subjects.
    """
    def __init__(self):
        self.router = APIRouter(tags=["Classes"])
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route("/classes/", self.list_classes, methods=["GET"], response_model=list[academic_models.ClassRead])
        self.router.add_api_route("/classes/", self.create_class, methods=["POST"], status_code=status.HTTP_201_CREATED, response_model=academic_models.ClassRead)
        self.router.add_api_route("/classes/{class_id}", self.get_class, methods=["GET"], response_model=academic_models.ClassRead)
        self.router.add_api_route("/classes/{class_id}", self.update_class, methods=["PATCH"], response_model=academic_models.ClassRead)
        self.router.add_api_route("/classes/{class_id}", self.delete_class, methods=["DELETE"], status_code=status.HTTP_204_NO_CONTENT)
        self.router.add_api_route("/classes/{class_id}/students", self.list_class_students, methods=["GET"], response_model=list[user_models.StudentRead])
        self.router.add_api_route("/subjects/", self.list_subjects, methods=["GET"], response_model=list[academic_models.SubjectRead])
        self.router.add_api_route("/subjects/", self.create_subject, methods=["POST"], status_code=status.HTTP_201_CREATED, response_model=academic_models.SubjectRead)
        self.router.add_api_route("/subjects/{subject_id}", self.delete_subject, methods=["DELETE"], status_code=status.HTTP_204_NO_CONTENT)

    async def list_classes(
        self,
        class_service: Annotated[ClassService, Depends(ClassService)],
        academic_year: Annotated[str | None, Query()] = None,
    ) -> list[Any]:
        return await class_service.list_classes(academic_year)

    async def create_class(
        self,
        class_data: academic_models.ClassCreate,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ) -> Any:
        return await class_service.create_class(class_data)

    async def get_class(
        self,
        class_id: UUID,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ) -> Any:
        return await class_service.get_class(class_id)

    async def update_class(
        self,
        class_id: UUID,
        update_data: academic_models.ClassUpdate,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ) -> Any:
        return await class_service.update_class(class_id, update_data)

    async def delete_class(
        self,
        class_id: UUID,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ):
        await class_service.delete_class(class_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    async def list_class_students(
        self,
        class_id: UUID,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ) -> list[Any]:
        return await class_service.list_class_students(class_id)

    async def list_subjects(
        self,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ) -> list[Any]:
        return await class_service.list_subjects()

    async def create_subject(
        self,
        subject_data: academic_models.SubjectCreate,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ) -> Any:
        return await class_service.create_subject(subject_data)

    async def delete_subject(
        self,
        subject_id: UUID,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ):
        await class_service.delete_subject(subject_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


class ExamsAPI:
    """
    A class to encapsulate endpoints for Exams and their results.
    """
    def __init__(self):
        self.router = APIRouter(
                prefix="/exams",
                tags=["Exams"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route("/", self.list_exams, methods=["GET"], response_model=list[academic_models.ExamRead])
        self.router.add_api_route("/", self.create_exam, methods=["POST"], status_code=status.HTTP_201_CREATED, response_model=academic_models.ExamRead)
        self.router.add_api_route("/{exam_id}", self.get_exam, methods=["GET"], response_model=academic_models.ExamRead)
        self.router.add_api_route("/{exam_id}", self.update_exam, methods=["PATCH"], response_model=academic_models.ExamRead)
        self.router.add_api_route("/{exam_id}", self.delete_exam, methods=["DELETE"], status_code=status.HTTP_204_NO_CONTENT)
        self.router.add_api_route("/{exam_id}/publish", self.publish_results, methods=["POST"], response_model=academic_models.ExamRead)
        self.router.add_api_route("/{exam_id}/unpublish", self.unpublish_results, methods=["POST"], response_model=academic_models.ExamRead)
        self.router.add_api_route("/{exam_id}/results", self.list_results, methods=["GET"], response_model=list[academic_models.ResultRead])
        self.router.add_api_route("/results", self.record_result, methods=["POST"], status_code=status.HTTP_201_CREATED, response_model=academic_models.ResultRead)
        self.router.add_api_route("/{exam_id}/results/bulk", self.bulk_record_results, methods=["POST"], response_model=BulkResult)

    async def list_exams(
        self,
        exam_service: Annotated[ExamService, Depends(ExamService)],
        class_id: Annotated[UUID | None, Query()] = None,
        academic_year: Annotated[str | None, Query()] = None,
    ) -> list[Any]:
        return await exam_service.list_exams(class_id, academic_year)

    async def create_exam(
        self,
        exam_data: academic_models.ExamCreate,
        exam_service: Annotated[ExamService, Depends(ExamService)]
    ) -> Any:
        return await exam_service.create_exam(exam_data)

    async def get_exam(
        self,
        exam_id: UUID,
        exam_service: Annotated[ExamService, Depends(ExamService)]
    ) -> Any:
        return await exam_service.get_exam(exam_id)

    async def update_exam(
        self,
        exam_id: UUID,
        update_data: academic_models.ExamUpdate,
        exam_service: Annotated[ExamService, Depends(ExamService)]
    ) -> Any:
        return await exam_service.update_exam(exam_id, update_data)

    async def delete_exam(
        self,
        exam_id: UUID,
        exam_service: Annotated[ExamService, Depends(ExamService)]
    ):
        await exam_service.delete_exam(exam_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    async def publish_results(
        self,
        exam_id: UUID,
        exam_service: Annotated[ExamService, Depends(ExamService)]
    ) -> Any:
        return await exam_service.set_results_published(exam_id, True)

    async def unpublish_results(
        self,
        exam_id: UUID,
        exam_service: Annotated[ExamService, Depends(ExamService)]
    ) -> Any:
        return await exam_service.set_results_published(exam_id, False)

    async def list_results(
        self,
        exam_id: UUID,
        exam_service: Annotated[ExamService, Depends(ExamService)]
    ) -> list[Any]:
        return await exam_service.list_results(exam_id)

    async def record_result(
        self,
        result_data: academic_models.ResultCreate,
        exam_service: Annotated[ExamService, Depends(ExamService)]
    ) -> Any:
        return await exam_service.record_result(result_data)

    async def bulk_record_results(
        self,
        exam_id: UUID,
        results: Annotated[list[dict], Body(embed=True)],
        exam_service: Annotated[ExamService, Depends(ExamService)],
        entered_by: Annotated[Optional[UUID], Body(embed=True)] = None,
    ) -> Any:
        return await exam_service.bulk_record_results(exam_id, results, entered_by)


# Instantiate and combine routers
classes_api = ClassesAPI()
exams_api = ExamsAPI()

router = APIRouter()
router.include_router(classes_api.router)
router.include_router(exams_api.router)
