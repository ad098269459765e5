"""System prompt assembly for the pregnancy assistant."""

from dataclasses import dataclass, field
from typing import Optional

from knowledge.models import EmergencyFact, EmotionalFact, FoodFact, SymptomFact

from .pregnancy import PregnancyContext, get_trimester_name

MAX_FOODS = 5
MAX_SYMPTOMS = 3
MAX_EMOTIONAL = 3


class PromptTemplates:
    """Fixed prompt text for the assistant."""

    SYSTEM = """你是"伴生"，一个专为准爸爸设计的孕期助手。你的角色是可靠的大哥——简洁、专业、给出可行动的建议。

## 当前状态
- 孕周：第{week}周第{day}天（{trimester_name}）
- 距离预产期：{days_until_due}天
- 宝宝大小：{size}（{comparison}，约{weight}）

{warning_signs}

## 回复原则
1. 简洁直接，不说废话。每句话都要有价值。
2. 给出具体可行动的建议，告诉他"现在就可以做什么"。
3. 涉及危险信号时，立即给出行动指令，不要犹豫。
4. 语气温暖但不啰嗦，像一个靠谱的老大哥。
5. 用"你"称呼用户，用"她"称呼他的伴侣。
6. 不要使用emoji，保持专业。

## 回复格式
- 如果是简单问题，直接回答。
- 如果涉及症状，先判断紧急程度，再给建议。
- 如果需要多步骤，用数字列表。
- 重要信息可以用"⚠️"或"✅"标注。"""

    WARNING_SIGNS = "本周需要注意的危险信号：\n{signs}"

    KB_SECTION = """

## 知识库参考数据
{facts}

使用说明：
- 仅基于上述事实回答，勿编造。
- 若包含紧急信息，先给行动指令，再解释。
- 无匹配项时按常规知识简洁回答。"""


@dataclass
class KbPayload:
    """Facts retrieved for one message."""

    foods: list[FoodFact] = field(default_factory=list)
    symptoms: list[SymptomFact] = field(default_factory=list)
    emotional: list[EmotionalFact] = field(default_factory=list)
    emergency: Optional[EmergencyFact] = None

    def is_empty(self) -> bool:
        return not (self.emergency or self.foods or self.symptoms or self.emotional)


def build_system_prompt(context: PregnancyContext) -> str:
    baby = context.baby_size
    warning = ""
    if context.warning_signs:
        signs = "\n".join(f"- {s}" for s in context.warning_signs)
        warning = PromptTemplates.WARNING_SIGNS.format(signs=signs)
    return PromptTemplates.SYSTEM.format(
        week=context.current_week,
        day=context.current_day,
        trimester_name=get_trimester_name(context.trimester),
        days_until_due=context.days_until_due,
        size=baby.size,
        comparison=baby.comparison,
        weight=baby.weight,
        warning_signs=warning,
    )


def build_context_summary(context: PregnancyContext) -> str:
    return f"第{context.current_week}周第{context.current_day}天 • {context.baby_size.comparison}"


def format_food(item: FoodFact) -> str:
    line = f"- 【{item.name}】安全等级：{item.safety_level.value}"
    if item.reason:
        line += f"｜{item.reason}"
    if item.dad_tip:
        line += f"｜爸提示：{item.dad_tip}"
    return line


def format_symptom(tree: SymptomFact) -> str:
    first_q = tree.questions[0] if tree.questions else ""
    paths = "；".join(
        f"{p.condition}→{p.action}({p.urgency.value})" for p in tree.decision_paths[:2]
    )
    return f"- 【{tree.symptom_name}】首问：{first_q}｜决策：{paths}"


def format_emotional(scenario: EmotionalFact) -> str:
    line = f"- 【{scenario.scenario_name}】正确回应：{scenario.right_response}"
    if scenario.follow_up_actions:
        line += f"｜后续：{scenario.follow_up_actions}"
    return line


def format_emergency(emergency: EmergencyFact) -> str:
    signs = "；".join(emergency.recognition_signs[:3])
    actions = "；".join(emergency.immediate_actions[:4])
    return f"⚠️【紧急：{emergency.emergency_name}】识别：{signs}｜立即执行：{actions}"


def build_kb_augmented_prompt(context: PregnancyContext, payload: Optional[KbPayload]) -> str:
    """Base prompt plus a reference-data section when facts were retrieved."""
    base = build_system_prompt(context)
    if payload is None or payload.is_empty():
        return base

    lines: list[str] = []
    if payload.emergency:
        lines.append(format_emergency(payload.emergency))
    lines.extend(format_food(f) for f in payload.foods[:MAX_FOODS])
    lines.extend(format_symptom(s) for s in payload.symptoms[:MAX_SYMPTOMS])
    lines.extend(format_emotional(e) for e in payload.emotional[:MAX_EMOTIONAL])

    return base + PromptTemplates.KB_SECTION.format(facts="\n".join(lines))
