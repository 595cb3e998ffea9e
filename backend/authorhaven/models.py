from pydantic import BaseModel, ConfigDict


class CustomModel(BaseModel):
    """
    프로젝트의 모든 Pydantic 스키마가 상속받는 공통 기본 모델.
    요청 바디는 camelCase 별칭(tagList 등)과 필드명 모두 허용합니다.
    """
    model_config = ConfigDict(
        # 필드 별칭(alias)과 필드명 둘 다로 값을 할당할 수 있습니다.
        populate_by_name=True,

        # SQLAlchemy 모델 객체를 그대로 응답 스키마로 변환
        from_attributes=True,

        extra="forbid",
    )


class StatusMessage(CustomModel):
    status: int
    message: str
