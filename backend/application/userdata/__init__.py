from application.userdata.personal_data import PersonalDataClient

__all__ = ["PersonalDataClient"]
