from objectquery import RemoteObject


class Player(RemoteObject):
    __class_name__ = "Player"


class Team(RemoteObject):
    __class_name__ = "Team"
