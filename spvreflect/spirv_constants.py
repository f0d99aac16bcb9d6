# Copyright Dario Mylonopoulos
# SPDX-License-Identifier: MIT

MagicNumber = 0x07230203
MagicNumberSwapped = 0x03022307
HeaderWordCount = 5

# The 16 bit word count leaves room for this many struct member ids.
MaxStructMembers = 0xFFFF - 2

# Opcodes
OpNop = 0
OpName = 5
OpMemberName = 6
OpEntryPoint = 15
OpExecutionMode = 16
OpTypeVoid = 19
OpTypeBool = 20
OpTypeInt = 21
OpTypeFloat = 22
OpTypeVector = 23
OpTypeMatrix = 24
OpTypeImage = 25
OpTypeSampler = 26
OpTypeSampledImage = 27
OpTypeArray = 28
OpTypeRuntimeArray = 29
OpTypeStruct = 30
OpTypePointer = 32
OpTypeFunction = 33
OpConstant = 43
OpConstantComposite = 44
OpFunction = 54
OpVariable = 59
OpLoad = 61
OpStore = 62
OpDecorate = 71
OpMemberDecorate = 72

# Execution modes
ExecutionModeLocalSize = 17

opcode_to_string = {
    0: "OpNop",
    5: "OpName",
    6: "OpMemberName",
    15: "OpEntryPoint",
    16: "OpExecutionMode",
    19: "OpTypeVoid",
    20: "OpTypeBool",
    21: "OpTypeInt",
    22: "OpTypeFloat",
    23: "OpTypeVector",
    24: "OpTypeMatrix",
    25: "OpTypeImage",
    26: "OpTypeSampler",
    27: "OpTypeSampledImage",
    28: "OpTypeArray",
    29: "OpTypeRuntimeArray",
    30: "OpTypeStruct",
    32: "OpTypePointer",
    33: "OpTypeFunction",
    43: "OpConstant",
    44: "OpConstantComposite",
    54: "OpFunction",
    59: "OpVariable",
    61: "OpLoad",
    62: "OpStore",
    71: "OpDecorate",
    72: "OpMemberDecorate",
}
