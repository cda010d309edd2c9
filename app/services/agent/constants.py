"""Constants for the conversation flow."""
from app.services.agent.state import CuisineType
from app.services.recommendation.models import BudgetRange

CUISINE_OPTIONS = {
    "中餐": CuisineType.CHINESE,
    "西餐": CuisineType.WESTERN,
}

CUISINE_LABELS = {value: label for label, value in CUISINE_OPTIONS.items()}

BUDGET_OPTIONS = [band.value for band in BudgetRange]

GREETING_MESSAGE = "你好！我是这个餐厅的点餐助手 🍽️ 很高兴为您服务！请问您今天想要吃中餐还是西餐呢？"

BUDGET_QUESTION = "好的！现在想了解一下您的预算范围，这样我能为您推荐最合适的菜品 💰"

# Synthesized request once cuisine and budget are known
RECOMMENDATION_REQUEST_TEMPLATE = "我想要{cuisine}，预算是{budget}元，请为我推荐一些菜品"

# Degraded replies when the model cannot be reached
BUDGET_DEGRADED_MESSAGE = (
    "好的，您选择了{budget}元的预算！现在请告诉我您想要什么类型的菜品，"
    "比如\"我想要一些下饭的热菜\"或\"来点不辣的主食\"，我会为您推荐合适的菜品！"
)
FREE_TEXT_DEGRADED_MESSAGE = (
    "抱歉，我现在有点忙不过来。不过没关系，请告诉我您想要什么类型的菜品，"
    "比如\"我想要一些不辣的热菜\"，我会为您推荐合适的菜品！"
)

NO_MATCH_MESSAGE = (
    "很抱歉，根据您的需求我们的菜单暂时没有合适的菜品推荐。请您换个要求试试，"
    "比如调整预算范围、辣度要求或者菜系偏好，我会尽力为您找到满意的菜品！"
)

# Used when the narration call fails but dishes were selected
RECOMMENDATION_FALLBACK_FRAMING = "为您精心挑选了以下菜品，点击卡片可以查看详情或加入购物车 😊"

CART_ACK_TEMPLATE = "{name} 已添加到购物车"

CHECKOUT_MESSAGE = "太棒了！你的菜单已经准备好了，马上就可以下单了 🎉 祝你用餐愉快！"
EMPTY_CART_CHECKOUT_MESSAGE = "您的购物车还是空的哦，先挑几道喜欢的菜品吧 😊"

# Quick questions offered in the dish details view
DISH_QUESTIONS = [
    "这道菜辣不辣？",
    "适合女生吃吗？",
    "这个菜油腻吗？",
    "有什么特色？",
    "配什么饮料好？",
    "适合几个人吃？",
]

# Keyword-dispatched answers about a dish, checked in order
DISH_ANSWER_SPICY = "{name}是{spice}的。{advice}"
DISH_ANSWER_SPICY_ADVICE_MILD = "不能吃辣也可以放心点 😊"
DISH_ANSWER_SPICY_ADVICE_HOT = "如果不能吃辣，我可以为您推荐清淡的菜品 😊"
DISH_ANSWER_SUITABILITY = (
    "我了解不同人群的饮食偏好！女性朋友通常喜欢营养均衡、口感清淡的菜品。"
    "我可以为您推荐一些养颜美容、暖胃健脾的菜品 💕"
)
DISH_ANSWER_GREASY = (
    "我很理解您对清淡饮食的需求！在我们的菜单中，蒸菜、汤品类都比较清爽不油腻。"
    "我可以为您详细介绍每道菜的烹饪方式和口感特点～"
)
DISH_ANSWER_FEATURE = "{name}：{description}"
DISH_ANSWER_DRINK = "{name}配一杯清爽的饮品正合适，可以解腻又提味 🍹"
DISH_ANSWER_PORTION = "一份{name}适合1-2人享用，多人聚餐的话可以多点几份或搭配其他菜品～"
DISH_ANSWER_RECOMMEND = (
    "作为专业的点餐助手，我会根据营养搭配、口味层次和您的具体需求来为您推荐菜品组合。"
    "让我为您精心搭配一份营养均衡又美味的套餐！"
)
DISH_ANSWER_DEFAULT = (
    "我很乐意为您解答任何关于菜品的问题！作为餐厅的专业点餐助手，"
    "我对每道菜的食材、口味、营养价值都很了解。还有什么想咨询的吗？ 😊"
)

# Keywords signalling that the customer wants dish recommendations
RECOMMENDATION_KEYWORDS = [
    # Recommend / suggest
    "推荐", "建议", "来点", "要点", "点菜", "想要", "给我", "需要", "适合",
    "recommend", "suggest",
    # What to eat
    "什么菜", "吃什么", "有什么", "菜品", "菜单",
    "what dish", "what should i eat", "menu",
    # Cuisine and categories
    "中餐", "西餐", "热菜", "小炒", "汤品", "主食", "饮品",
    # Budget
    "预算", "便宜", "实惠", "budget", "cheap",
    # Spice
    "辣", "清淡", "spicy", "mild",
    # Nutrition
    "健身", "高蛋白", "低卡", "营养", "减脂", "protein", "calorie", "healthy",
    # Meal times
    "早餐", "午餐", "午饭", "晚餐", "晚饭", "夜宵", "下午茶",
    "breakfast", "lunch", "dinner",
]
