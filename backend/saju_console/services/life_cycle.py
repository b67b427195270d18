"""
십이운성 / 십이신살 조회 테이블
- 십이운성: 일간(천간) 기준 대상 지지의 운성 (10 × 12)
- 십이신살: 기준 지지 기준 대상 지지의 신살 (12 × 12)
- 테이블 밖 조회는 None (화면에는 '—')
"""
from typing import Optional

from saju_console.services.ganji import EngineError, StemLike, BranchLike, as_stem, as_branch

EMPTY_MARK = "—"

TWELVE_STAGES = ["장생", "목욕", "관대", "건록", "제왕", "쇠", "병", "사", "묘", "절", "태", "양"]

# 십이운성 (일간 → 지지 → 운성)
TWELVE_STAGE_MAP = {
    '甲': {'亥': '장생', '子': '목욕', '丑': '관대', '寅': '건록', '卯': '제왕', '辰': '쇠', '巳': '병', '午': '사', '未': '묘', '申': '절', '酉': '태', '戌': '양'},
    '乙': {'午': '장생', '巳': '목욕', '辰': '관대', '卯': '건록', '寅': '제왕', '丑': '쇠', '子': '병', '亥': '사', '戌': '묘', '酉': '절', '申': '태', '未': '양'},
    '丙': {'寅': '장생', '卯': '목욕', '辰': '관대', '巳': '건록', '午': '제왕', '未': '쇠', '申': '병', '酉': '사', '戌': '묘', '亥': '절', '子': '태', '丑': '양'},
    '丁': {'酉': '장생', '申': '목욕', '未': '관대', '午': '건록', '巳': '제왕', '辰': '쇠', '卯': '병', '寅': '사', '丑': '묘', '子': '절', '亥': '태', '戌': '양'},
    '戊': {'寅': '장생', '卯': '목욕', '辰': '관대', '巳': '건록', '午': '제왕', '未': '쇠', '申': '병', '酉': '사', '戌': '묘', '亥': '절', '子': '태', '丑': '양'},
    '己': {'酉': '장생', '申': '목욕', '未': '관대', '午': '건록', '巳': '제왕', '辰': '쇠', '卯': '병', '寅': '사', '丑': '묘', '子': '절', '亥': '태', '戌': '양'},
    '庚': {'巳': '장생', '午': '목욕', '未': '관대', '申': '건록', '酉': '제왕', '戌': '쇠', '亥': '병', '子': '사', '丑': '묘', '寅': '절', '卯': '태', '辰': '양'},
    '辛': {'子': '장생', '亥': '목욕', '戌': '관대', '酉': '건록', '申': '제왕', '未': '쇠', '午': '병', '巳': '사', '辰': '묘', '卯': '절', '寅': '태', '丑': '양'},
    '壬': {'申': '장생', '酉': '목욕', '戌': '관대', '亥': '건록', '子': '제왕', '丑': '쇠', '寅': '병', '卯': '사', '辰': '묘', '巳': '절', '午': '태', '未': '양'},
    '癸': {'卯': '장생', '寅': '목욕', '丑': '관대', '子': '건록', '亥': '제왕', '戌': '쇠', '酉': '병', '申': '사', '未': '묘', '午': '절', '巳': '태', '辰': '양'},
}

# 십이신살 (기준 지지 → 대상 지지 → 신살)
TWELVE_SPIRIT_MAP = {
    '子': {'子': '태극귀인', '丑': '천을귀인', '寅': '천덕귀인', '卯': '월덕귀인', '辰': '화개', '巳': '역마', '午': '도화', '未': '문창', '申': '학당', '酉': '재성', '戌': '천라', '亥': '지망'},
    '丑': {'子': '태극귀인', '丑': '지망', '寅': '천을귀인', '卯': '천덕귀인', '辰': '월덕귀인', '巳': '화개', '午': '역마', '未': '도화', '申': '문창', '酉': '학당', '戌': '재성', '亥': '천라'},
    '寅': {'子': '문창', '丑': '학당', '寅': '재성', '卯': '천라', '辰': '지망', '巳': '태극귀인', '午': '천을귀인', '未': '천덕귀인', '申': '월덕귀인', '酉': '화개', '戌': '역마', '亥': '도화'},
    '卯': {'子': '역마', '丑': '도화', '寅': '문창', '卯': '학당', '辰': '재성', '巳': '천라', '午': '지망', '未': '태극귀인', '申': '천을귀인', '酉': '천덕귀인', '戌': '월덕귀인', '亥': '화개'},
    '辰': {'子': '역마', '丑': '도화', '寅': '문창', '卯': '학당', '辰': '재성', '巳': '천라', '午': '지망', '未': '태극귀인', '申': '천을귀인', '酉': '천덕귀인', '戌': '월덕귀인', '亥': '화개'},
    '巳': {'子': '재성', '丑': '천라', '寅': '지망', '卯': '태극귀인', '辰': '천을귀인', '巳': '천덕귀인', '午': '월덕귀인', '未': '화개', '申': '역마', '酉': '도화', '戌': '문창', '亥': '학당'},
    '午': {'子': '월덕귀인', '丑': '화개', '寅': '역마', '卯': '도화', '辰': '문창', '巳': '학당', '午': '재성', '未': '천라', '申': '지망', '酉': '태극귀인', '戌': '천을귀인', '亥': '천덕귀인'},
    '未': {'子': '월덕귀인', '丑': '화개', '寅': '역마', '卯': '도화', '辰': '문창', '巳': '학당', '午': '재성', '未': '천라', '申': '지망', '酉': '태극귀인', '戌': '천을귀인', '亥': '천덕귀인'},
    '申': {'子': '학당', '丑': '재성', '寅': '천라', '卯': '지망', '辰': '태극귀인', '巳': '천을귀인', '午': '천덕귀인', '未': '월덕귀인', '申': '화개', '酉': '역마', '戌': '도화', '亥': '문창'},
    '酉': {'子': '화개', '丑': '역마', '寅': '도화', '卯': '문창', '辰': '학당', '巳': '재성', '午': '천라', '未': '지망', '申': '태극귀인', '酉': '천을귀인', '戌': '천덕귀인', '亥': '월덕귀인'},
    '戌': {'子': '화개', '丑': '역마', '寅': '도화', '卯': '문창', '辰': '학당', '巳': '재성', '午': '천라', '未': '지망', '申': '태극귀인', '酉': '천을귀인', '戌': '천덕귀인', '亥': '월덕귀인'},
    '亥': {'子': '천덕귀인', '丑': '월덕귀인', '寅': '화개', '卯': '역마', '辰': '도화', '巳': '문창', '午': '학당', '未': '재성', '申': '천라', '酉': '지망', '戌': '태극귀인', '亥': '천을귀인'},
}


def twelve_stage(reference_stem: StemLike, target_branch: BranchLike) -> Optional[str]:
    """십이운성 조회 (테이블 밖이면 None)"""
    try:
        stem = as_stem(reference_stem)
        branch = as_branch(target_branch)
    except EngineError:
        return None
    return TWELVE_STAGE_MAP.get(stem.hanja, {}).get(branch.hanja)


def twelve_spirit(reference_branch: BranchLike, target_branch: BranchLike) -> Optional[str]:
    """십이신살 조회 (테이블 밖이면 None)"""
    try:
        ref = as_branch(reference_branch)
        target = as_branch(target_branch)
    except EngineError:
        return None
    return TWELVE_SPIRIT_MAP.get(ref.hanja, {}).get(target.hanja)


def display(label: Optional[str]) -> str:
    return label or EMPTY_MARK
