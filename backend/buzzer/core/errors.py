"""
业务异常定义

所有异常都继承自ValueError，路由层按 status_code 转换为HTTP错误。
"""


class BuzzerError(ValueError):
    """抢答器业务异常基类"""
    code = "buzzer_error"
    status_code = 400


class SlotTaken(BuzzerError):
    """席位已被占用"""
    code = "slot_taken"
    status_code = 409

    def __init__(self, team_number: int):
        super().__init__(f"{team_number}号席位已被占用，请选择其他席位")
        self.team_number = team_number


class InvalidSlot(BuzzerError):
    """席位编号超出范围"""
    code = "invalid_slot"

    def __init__(self, team_number: int, max_teams: int):
        super().__init__(f"席位编号必须在1到{max_teams}之间，收到: {team_number}")
        self.team_number = team_number


class SessionFull(BuzzerError):
    """场次题目已满"""
    code = "session_full"
    status_code = 409

    def __init__(self, limit: int):
        super().__init__(f"每个场次最多只能有{limit}道题目")
        self.limit = limit


class TeamNotFound(BuzzerError):
    code = "team_not_found"
    status_code = 404

    def __init__(self, team_id: int):
        super().__init__(f"队伍不存在: {team_id}")
        self.team_id = team_id


class SessionNotFound(BuzzerError):
    code = "session_not_found"
    status_code = 404

    def __init__(self, session_id: int):
        super().__init__(f"场次不存在: {session_id}")
        self.session_id = session_id


class QuestionNotFound(BuzzerError):
    code = "question_not_found"
    status_code = 404

    def __init__(self, question_id: int):
        super().__init__(f"题目不存在: {question_id}")
        self.question_id = question_id


class SessionCompleted(BuzzerError):
    """已完成的场次不能再次激活"""
    code = "session_completed"
    status_code = 409

    def __init__(self, session_id: int):
        super().__init__(f"场次 {session_id} 已完成，不能再次激活")
        self.session_id = session_id


class NoActiveSession(BuzzerError):
    code = "no_active_session"

    def __init__(self):
        super().__init__("当前没有激活的场次")


class NoActiveQuestion(BuzzerError):
    code = "no_active_question"

    def __init__(self):
        super().__init__("当前没有正在展示的题目")


class NoQuestions(BuzzerError):
    code = "no_questions"

    def __init__(self, session_id: int):
        super().__init__(f"场次 {session_id} 还没有题目，请先添加题目")
        self.session_id = session_id


class NoTeams(BuzzerError):
    code = "no_teams"

    def __init__(self):
        super().__init__("没有已注册的队伍，无法决出获胜者")


class QuestionIndexOutOfRange(BuzzerError):
    code = "question_index_out_of_range"

    def __init__(self, index: int, count: int):
        super().__init__(f"题目序号 {index} 超出范围（共 {count} 道题）")
        self.index = index
        self.count = count
