'''
API endpoints for parents, students and teachers.
'''
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Response, status

from ..database.db_enums import StudentStatus
from ..models import users as user_models
from ..models.common import BulkResult
from ..services.user_service import ParentService, StudentService, TeacherService


class ParentsAPI:
    """
    A class to encapsulate endpoints for Parents.
    """
    def __init__(self):
        self.router = APIRouter(
                prefix="/parents",
                tags=["Parents"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "/",
                self.list_parents,
                methods=["GET"],
                response_model=list[user_models.ParentRead])
        self.router.add_api_route(
                "/",
                self.create_parent,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=user_models.ParentRead)
        self.router.add_api_route(
                "/{parent_id}",
                self.get_parent,
                methods=["GET"],
                response_model=user_models.ParentRead)
        self.router.add_api_route(
                "/{parent_id}",
                self.update_parent,
                methods=["PATCH"],
                response_model=user_models.ParentRead)
        self.router.add_api_route(
                "/{parent_id}",
                self.delete_parent,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)
        self.router.add_api_route(
                "/{parent_id}/students",
                self.get_children,
                methods=["GET"],
                response_model=list[user_models.StudentRead])

    async def list_parents(
        self,
        parent_service: Annotated[ParentService, Depends(ParentService)]
    ) -> list[Any]:
        return await parent_service.list_parents()

    async def create_parent(
        self,
        parent_data: user_models.ParentCreate,
        parent_service: Annotated[ParentService, Depends(ParentService)]
    ) -> Any:
        return await parent_service.create_parent(parent_data)

    async def get_parent(
        self,
        parent_id: UUID,
        parent_service: Annotated[ParentService, Depends(ParentService)]
    ) -> Any:
        return await parent_service.get_parent(parent_id)

    async def update_parent(
        self,
        parent_id: UUID,
        update_data: user_models.ParentUpdate,
        parent_service: Annotated[ParentService, Depends(ParentService)]
    ) -> Any:
        return await parent_service.update_parent(parent_id, update_data)

    async def delete_parent(
        self,
        parent_id: UUID,
        parent_service: Annotated[ParentService, Depends(ParentService)]
    ):
        await parent_service.delete_parent(parent_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    async def get_children(
        self,
        parent_id: UUID,
        parent_service: Annotated[ParentService, Depends(ParentService)]
    ) -> list[Any]:
        return await parent_service.get_children(parent_id)


class StudentsAPI:
    """
    A class to encapsulate endpoints for Students.
    """
    def __init__(self):
        self.router = APIRouter(
                prefix="/students",
                tags=["Students"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "/",
                self.list_students,
                methods=["GET"],
                response_model=list[user_models.StudentRead])
        self.router.add_api_route(
                "/",
                self.create_student,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=user_models.StudentRead)
        self.router.add_api_route(
                "/bulk-import",
                self.bulk_import_students,
                methods=["POST"],
                response_model=BulkResult)
        self.router.add_api_route(
                "/{student_id}",
                self.get_student,
                methods=["GET"],
                response_model=user_models.StudentRead)
        self.router.add_api_route(
                "/{student_id}",
                self.update_student,
                methods=["PATCH"],
                response_model=user_models.StudentRead)
        self.router.add_api_route(
                "/{student_id}",
                self.delete_student,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)

    async def list_students(
        self,
        student_service: Annotated[StudentService, Depends(StudentService)],
        class_id: Annotated[UUID | None, Query()] = None,
        parent_id: Annotated[UUID | None, Query()] = None,
        student_status: Annotated[StudentStatus | None, Query(alias="status")] = None,
        search: Annotated[str | None, Query(description="Matches name or admission number")] = None,
    ) -> list[Any]:
        filters = user_models.StudentFilters(
            class_id=class_id, parent_id=parent_id, status=student_status, search=search
        )
        return await student_service.list_students(filters)

    async def create_student(
        self,
        student_data: user_models.StudentCreate,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ) -> Any:
        return await student_service.create_student(student_data)

    async def bulk_import_students(
        self,
        records: Annotated[list[dict], Body(embed=True, alias="students")],
        student_service: Annotated[StudentService, Depends(StudentService)]
    ) -> Any:
        """
        Imports many students at once. Each record succeeds or fails on its own.
        """
        return await student_service.bulk_import_students(records)

    async def get_student(
        self,
        student_id: UUID,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ) -> Any:
        return await student_service.get_student(student_id)

    async def update_student(
        self,
        student_id: UUID,
        update_data: user_models.StudentUpdate,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ) -> Any:
        return await student_service.update_student(student_id, update_data)

    async def delete_student(
        self,
        student_id: UUID,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        await student_service.delete_student(student_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


class TeachersAPI:
    """
    A class to encapsulate endpoints for Teachers.
    """
    def __init__(self):
        self.router = APIRouter(
                prefix="/teachers",
                tags=["Teachers"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "/",
                self.list_teachers,
                methods=["GET"],
                response_model=list[user_models.TeacherRead])
        self.router.add_api_route(
                "/",
                self.create_teacher,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=user_models.TeacherRead)
        self.router.add_api_route(
                "/{teacher_id}",
                self.get_teacher,
                methods=["GET"],
                response_model=user_models.TeacherRead)
        self.router.add_api_route(
                "/{teacher_id}",
                self.update_teacher,
                methods=["PATCH"],
                response_model=user_models.TeacherRead)
        self.router.add_api_route(
                "/{teacher_id}",
                self.delete_teacher,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)

    async def list_teachers(
        self,
        teacher_service: Annotated[TeacherService, Depends(TeacherService)]
    ) -> list[Any]:
        return await teacher_service.list_teachers()

    async def create_teacher(
        self,
        teacher_data: user_models.TeacherCreate,
        teacher_service: Annotated[TeacherService, Depends(TeacherService)]
    ) -> Any:
        return await teacher_service.create_teacher(teacher_data)

    async def get_teacher(
        self,
        teacher_id: UUID,
        teacher_service: Annotated[TeacherService, Depends(TeacherService)]
    ) -> Any:
        return await teacher_service.get_teacher(teacher_id)

    async def update_teacher(
        self,
        teacher_id: UUID,
        update_data: user_models.TeacherUpdate,
        teacher_service: Annotated[TeacherService, Depends(TeacherService)]
    ) -> Any:
        return await teacher_service.update_teacher(teacher_id, update_data)

    async def delete_teacher(
        self,
        teacher_id: UUID,
        teacher_service: Annotated[TeacherService, Depends(TeacherService)]
    ):
        await teacher_service.delete_teacher(teacher_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


# Instantiate and combine routers
parents_api = ParentsAPI()
students_api = StudentsAPI()
teachers_api = TeachersAPI()

router = APIRouter()
router.include_router(parents_api.router)
router.include_router(students_api.router)
router.include_router(teachers_api.router)
