from infrastructure.userdata.factory import UserDataBackends, UserDataFactory, create_user_data

__all__ = ["UserDataBackends", "UserDataFactory", "create_user_data"]
